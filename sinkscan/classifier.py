"""
Constant/taint classification of Java expressions.

A value is *constant* when it is a literal or a reference to a ``static
final`` field. Anything else, including unresolved references, is treated as
tainted: it may carry data from outside the program.
"""

from typing import Iterable, List, Optional

from sinkscan.nodes import LITERAL_TYPES, REFERENCE_TYPES, SourceNode, unwrap

# Bound on nested conditionals and collection literals explored per value.
MAX_DEPTH = 200


def is_constant(node: Optional[SourceNode], allow_conditional: bool = False,
                _depth: int = 0) -> bool:
    """Return True if ``node`` always evaluates to a compile-time constant.

    With ``allow_conditional`` a ternary whose branches are both constant is
    constant as well. Exceeding ``MAX_DEPTH`` classifies as not constant.
    """
    node = unwrap(node)
    if node is None or _depth > MAX_DEPTH:
        return False
    if node.type in LITERAL_TYPES:
        return True
    if node.type in REFERENCE_TYPES:
        symbol = node.unit.symbols.resolve_reference(node)
        return symbol is not None and symbol.is_constant
    if allow_conditional and node.type == "ternary_expression":
        return all(is_constant(branch, True, _depth + 1)
                   for branch in (node.field("consequence"), node.field("alternative")))
    return False


def is_concatenation(node: Optional[SourceNode]) -> bool:
    node = unwrap(node)
    if node is None or node.type != "binary_expression":
        return False
    operator = node.field("operator")
    return operator is not None and operator.text == "+"


def concatenation_operands(node: SourceNode) -> List[SourceNode]:
    """Flatten a ``+`` chain into its leaf operands, left to right."""
    leaves = []
    stack = [unwrap(node)]
    while stack:
        current = stack.pop()
        if current is None:
            continue
        if is_concatenation(current):
            stack.append(unwrap(current.field("right")))
            stack.append(unwrap(current.field("left")))
        else:
            leaves.append(current)
    return leaves


def has_tainted_operand(node: SourceNode) -> bool:
    return any(not is_constant(leaf) for leaf in concatenation_operands(node))


def contains_concatenation_of(keywords: Iterable[str], node: Optional[SourceNode]) -> bool:
    """True for a ``+`` chain that mentions a keyword and has a non-constant operand.

    Keywords are matched case-insensitively as substrings of the chain's
    full source text. Chains made only of constants never match.
    """
    node = unwrap(node)
    if not is_concatenation(node):
        return False
    text = node.text.lower()
    if not any(k.lower() in text for k in keywords):
        return False
    return has_tainted_operand(node)
