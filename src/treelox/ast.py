"""
Syntax tree node definitions for treelox programs.

The tree is produced by an external parser and consumed by the Resolver and
the Interpreter. Nodes are immutable and compare by identity: two `a`
references at different source locations are different nodes, which is what
lets the resolution table be keyed by node occurrence.

Expression nodes:
    Literal, Variable, Assign, BinaryOp, LogicalOp, UnaryOp, Grouping,
    Call, GetProperty, SetProperty, This, Super

Statement nodes:
    Block, ExpressionStatement, PrintStatement, VarDecl, IfStatement,
    WhileStatement, FunctionDef, ReturnStatement, ClassDef
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union, Any
from abc import ABC
from .tokens import Token


# =============================================================================
# Base Classes
# =============================================================================

@dataclass(frozen=True, eq=False)
class AstNode(ABC):
    """Base class for all syntax tree nodes."""

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for syntax tree visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True, eq=False)
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass(frozen=True, eq=False)
class Literal(Expression):
    """A literal value: nil (None), a boolean, a number or a string."""
    value: Union[None, bool, float, str]


@dataclass(frozen=True, eq=False)
class Variable(Expression):
    """A variable reference."""
    name: Token


@dataclass(frozen=True, eq=False)
class Assign(Expression):
    """An assignment. Only a Variable target is valid; the Resolver reports others."""
    target: Expression
    equals: Token
    value: Expression

    @property
    def name(self) -> Token:
        return self.target.name if isinstance(self.target, Variable) else self.equals


@dataclass(frozen=True, eq=False)
class BinaryOp(Expression):
    """An arithmetic, comparison or equality operation."""
    left: Expression
    operator: Token
    right: Expression


@dataclass(frozen=True, eq=False)
class LogicalOp(Expression):
    """A short-circuiting `and` / `or`."""
    left: Expression
    operator: Token
    right: Expression


@dataclass(frozen=True, eq=False)
class UnaryOp(Expression):
    """A unary operation (`!x`, `-n`)."""
    operator: Token
    operand: Expression


@dataclass(frozen=True, eq=False)
class Grouping(Expression):
    """A parenthesized expression."""
    expression: Expression


@dataclass(frozen=True, eq=False)
class Call(Expression):
    """A call; `paren` is the closing parenthesis, used for error reporting."""
    callee: Expression
    paren: Token
    arguments: Tuple[Expression, ...] = ()


@dataclass(frozen=True, eq=False)
class GetProperty(Expression):
    """Property access (e.g., point.x)."""
    object: Expression
    name: Token


@dataclass(frozen=True, eq=False)
class SetProperty(Expression):
    """Property assignment (e.g., point.x = 1)."""
    object: Expression
    name: Token
    value: Expression


@dataclass(frozen=True, eq=False)
class This(Expression):
    """The `this` keyword inside a method."""
    keyword: Token


@dataclass(frozen=True, eq=False)
class Super(Expression):
    """A superclass method reference (e.g., super.init)."""
    keyword: Token
    method: Token


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True, eq=False)
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass(frozen=True, eq=False)
class Block(Statement):
    """A braced block of statements, run in its own scope."""
    statements: Tuple[Statement, ...] = ()


@dataclass(frozen=True, eq=False)
class ExpressionStatement(Statement):
    """An expression evaluated for its side effects."""
    expression: Expression


@dataclass(frozen=True, eq=False)
class PrintStatement(Statement):
    """Print the value of an expression on its own line."""
    expression: Expression


@dataclass(frozen=True, eq=False)
class VarDecl(Statement):
    """A variable declaration; a missing initializer means nil."""
    name: Token
    initializer: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class IfStatement(Statement):
    """An if statement with an optional else branch."""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass(frozen=True, eq=False)
class WhileStatement(Statement):
    """A while loop. `for` loops arrive desugared into this form."""
    condition: Expression
    body: Statement


@dataclass(frozen=True, eq=False)
class FunctionDef(Statement):
    """A function declaration, also used for class methods."""
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Statement, ...]


@dataclass(frozen=True, eq=False)
class ReturnStatement(Statement):
    """A return statement."""
    keyword: Token
    value: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class ClassDef(Statement):
    """A class declaration with an optional superclass."""
    name: Token
    superclass: Optional[Variable]
    methods: Tuple[FunctionDef, ...] = ()


# Closed sets of node kinds; every consumer handles each member.
ExprNode = Union[
    Literal, Variable, Assign, BinaryOp, LogicalOp, UnaryOp, Grouping,
    Call, GetProperty, SetProperty, This, Super,
]
StmtNode = Union[
    Block, ExpressionStatement, PrintStatement, VarDecl, IfStatement,
    WhileStatement, FunctionDef, ReturnStatement, ClassDef,
]
Program = Tuple[Statement, ...]


# =============================================================================
# Printer
# =============================================================================

class AstPrinter(AstVisitor):
    """Render a tree in parenthesized prefix form, e.g. `(+ 1 (group 2))`."""

    def print(self, node: AstNode) -> str:
        return node.accept(self)

    def _parenthesize(self, name: str, *parts: Any) -> str:
        rendered = [name]
        for part in parts:
            if isinstance(part, AstNode):
                rendered.append(part.accept(self))
            elif isinstance(part, Token):
                rendered.append(part.lexeme)
            else:
                rendered.append(str(part))
        return "(" + " ".join(rendered) + ")"

    # --- Expressions ---

    def visit_Literal(self, expr: Literal) -> str:
        if expr.value is None:
            return "nil"
        if isinstance(expr.value, bool):
            return "true" if expr.value else "false"
        if isinstance(expr.value, str):
            return f'"{expr.value}"'
        return str(expr.value)

    def visit_Variable(self, expr: Variable) -> str:
        return expr.name.lexeme

    def visit_Assign(self, expr: Assign) -> str:
        return self._parenthesize("=", expr.target, expr.value)

    def visit_BinaryOp(self, expr: BinaryOp) -> str:
        return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_LogicalOp(self, expr: LogicalOp) -> str:
        return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_UnaryOp(self, expr: UnaryOp) -> str:
        return self._parenthesize(expr.operator.lexeme, expr.operand)

    def visit_Grouping(self, expr: Grouping) -> str:
        return self._parenthesize("group", expr.expression)

    def visit_Call(self, expr: Call) -> str:
        return self._parenthesize("call", expr.callee, *expr.arguments)

    def visit_GetProperty(self, expr: GetProperty) -> str:
        return self._parenthesize(".", expr.object, expr.name)

    def visit_SetProperty(self, expr: SetProperty) -> str:
        return self._parenthesize("=", self._parenthesize(".", expr.object, expr.name), expr.value)

    def visit_This(self, expr: This) -> str:
        return "this"

    def visit_Super(self, expr: Super) -> str:
        return self._parenthesize("super", expr.method)

    # --- Statements ---

    def visit_Block(self, stmt: Block) -> str:
        return self._parenthesize("block", *stmt.statements)

    def visit_ExpressionStatement(self, stmt: ExpressionStatement) -> str:
        return self._parenthesize(";", stmt.expression)

    def visit_PrintStatement(self, stmt: PrintStatement) -> str:
        return self._parenthesize("print", stmt.expression)

    def visit_VarDecl(self, stmt: VarDecl) -> str:
        if stmt.initializer is None:
            return self._parenthesize("var", stmt.name)
        return self._parenthesize("var", stmt.name, stmt.initializer)

    def visit_IfStatement(self, stmt: IfStatement) -> str:
        if stmt.else_branch is None:
            return self._parenthesize("if", stmt.condition, stmt.then_branch)
        return self._parenthesize("if-else", stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_WhileStatement(self, stmt: WhileStatement) -> str:
        return self._parenthesize("while", stmt.condition, stmt.body)

    def visit_FunctionDef(self, stmt: FunctionDef) -> str:
        params = "(" + " ".join(p.lexeme for p in stmt.params) + ")"
        return self._parenthesize("fun", stmt.name, params, *stmt.body)

    def visit_ReturnStatement(self, stmt: ReturnStatement) -> str:
        if stmt.value is None:
            return "(return)"
        return self._parenthesize("return", stmt.value)

    def visit_ClassDef(self, stmt: ClassDef) -> str:
        if stmt.superclass is not None:
            return self._parenthesize("class", stmt.name, "<", stmt.superclass, *stmt.methods)
        return self._parenthesize("class", stmt.name, *stmt.methods)


def format_ast(node: AstNode) -> str:
    """Render a node as a parenthesized string for debugging."""
    return AstPrinter().print(node)
