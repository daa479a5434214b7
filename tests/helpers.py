"""
Syntax tree builders for tests.

Programs are built directly as trees since scanning and parsing happen
outside treelox. Every builder call creates fresh nodes.
"""

from treelox.ast import (
    Literal, Variable, Assign, BinaryOp, LogicalOp, UnaryOp, Grouping,
    Call, GetProperty, SetProperty, This, Super,
    Block, ExpressionStatement, PrintStatement, VarDecl, IfStatement,
    WhileStatement, FunctionDef, ReturnStatement, ClassDef,
)
from treelox.tokens import Token, TokenType, KEYWORDS


OPERATORS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "!": TokenType.BANG,
    "==": TokenType.EQUAL_EQUAL,
    "!=": TokenType.BANG_EQUAL,
    "<": TokenType.LESS,
    "<=": TokenType.LESS_EQUAL,
    ">": TokenType.GREATER,
    ">=": TokenType.GREATER_EQUAL,
    "and": TokenType.AND,
    "or": TokenType.OR,
}


def ident(lexeme, line=1):
    return Token(KEYWORDS.get(lexeme, TokenType.IDENTIFIER), lexeme, None, line)


def op(symbol, line=1):
    return Token(OPERATORS[symbol], symbol, None, line)


# --- Expressions ---

def num(value):
    return Literal(float(value))


def string(value):
    return Literal(value)


def nil():
    return Literal(None)


def true():
    return Literal(True)


def false():
    return Literal(False)


def var(name, line=1):
    return Variable(ident(name, line))


def assign(name, value, line=1):
    return Assign(var(name, line), Token(TokenType.EQUAL, "=", None, line), value)


def assign_to(target, value, line=1):
    return Assign(target, Token(TokenType.EQUAL, "=", None, line), value)


def binary(left, symbol, right, line=1):
    return BinaryOp(left, op(symbol, line), right)


def logical(left, symbol, right, line=1):
    return LogicalOp(left, op(symbol, line), right)


def unary(symbol, operand, line=1):
    return UnaryOp(op(symbol, line), operand)


def group(expr):
    return Grouping(expr)


def call(callee, *arguments, line=1):
    return Call(callee, Token(TokenType.RIGHT_PAREN, ")", None, line), tuple(arguments))


def get(obj, name, line=1):
    return GetProperty(obj, ident(name, line))


def set_(obj, name, value, line=1):
    return SetProperty(obj, ident(name, line), value)


def this(line=1):
    return This(ident("this", line))


def super_(method, line=1):
    return Super(ident("super", line), ident(method, line))


# --- Statements ---

def block(*statements):
    return Block(tuple(statements))


def expr_stmt(expr):
    return ExpressionStatement(expr)


def print_(expr):
    return PrintStatement(expr)


def var_decl(name, initializer=None, line=1):
    return VarDecl(ident(name, line), initializer)


def if_(condition, then_branch, else_branch=None):
    return IfStatement(condition, then_branch, else_branch)


def while_(condition, body):
    return WhileStatement(condition, body)


def fun(name, params, *body, line=1):
    return FunctionDef(ident(name, line), tuple(ident(p, line) for p in params), tuple(body))


def ret(value=None, line=1):
    return ReturnStatement(ident("return", line), value)


def klass(name, *methods, superclass=None, line=1):
    parent = var(superclass, line) if superclass is not None else None
    return ClassDef(ident(name, line), parent, tuple(methods))


def program(*statements):
    return tuple(statements)
