from typing import Any, Callable, Dict, Iterable, NamedTuple, Optional, Union

from selectolax.parser import HTMLParser, Node


# ===========================
# Field Rule
# ===========================
class FieldRule(NamedTuple):
    """One ``selector -> field`` mapping.

    ``selector`` None targets the node itself, ``attribute`` None reads the
    stripped text. ``many`` collects the text/attribute of every match. A
    ``cast`` returning None or raising ValueError yields ``default``.
    """

    field: str
    selector: Optional[str] = None
    attribute: Optional[str] = None
    default: Any = ""
    many: bool = False
    cast: Optional[Callable[[str], Any]] = None


# ===========================
# Node Reading
# ===========================
def read_node(node: Node, attribute: Optional[str] = None) -> Optional[str]:
    if attribute is None:
        return node.text().strip()

    value = node.attributes.get(attribute)
    if value is None:
        return None
    return value.strip()


def _apply_cast(rule: FieldRule, raw: Optional[str]) -> Any:
    if raw is None or raw == "":
        return rule.default
    if rule.cast is None:
        return raw

    try:
        value = rule.cast(raw)
    except ValueError:
        return rule.default
    return rule.default if value is None else value


# ===========================
# Rule Evaluation
# ===========================
def extract_field(root: Union[Node, HTMLParser], rule: FieldRule) -> Any:
    if rule.many:
        nodes = root.css(rule.selector) if rule.selector else [root]
        values = [read_node(node, rule.attribute) for node in nodes]
        return [value for value in values if value]

    node = root.css_first(rule.selector) if rule.selector else root
    if node is None:
        return rule.default
    return _apply_cast(rule, read_node(node, rule.attribute))


def extract_fields(root: Union[Node, HTMLParser], rules: Iterable[FieldRule]) -> Dict[str, Any]:
    return {rule.field: extract_field(root, rule) for rule in rules}
