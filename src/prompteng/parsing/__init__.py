"""
Prompteng parsing components.

This package provides the template lexer, the expression parser, and the
parser that builds directive trees from template source.
"""

from prompteng.parsing.expressions import (
    Expression,
    ExpressionParser,
    parse_expression,
)
from prompteng.parsing.lexer import Token, TokenKind, tokenize
from prompteng.parsing.parser import (
    ParsedTemplate,
    TemplateTreeParser,
    TokenStream,
    parse_template,
)

__all__ = [
    "Expression",
    "ExpressionParser",
    "ParsedTemplate",
    "TemplateTreeParser",
    "Token",
    "TokenKind",
    "TokenStream",
    "parse_expression",
    "parse_template",
    "tokenize",
]
