"""
Symbols and lexical scope lookup for one compilation unit.

The table is built lazily: the package, imports and same-file type
declarations are read once, and variable lookups walk outwards from the use
site through the enclosing blocks, loops, catch clauses, callables and type
bodies, the way javac's scoping rules do for a single file.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from sinkscan.javatypes import (
    JAVA_LANG_TYPES, KNOWN_TYPES, PRIMITIVE_TYPES, normalize_type_text, simple_name,
)
from sinkscan.nodes import SourceNode, unwrap

logger = logging.getLogger(__name__)

TYPE_DECLARATION_TYPES = frozenset({
    "class_declaration", "interface_declaration", "enum_declaration",
    "record_declaration", "annotation_type_declaration",
})
TYPE_BODY_TYPES = frozenset({
    "class_body", "interface_body", "enum_body", "enum_body_declarations",
    "annotation_type_body",
})
CALLABLE_TYPES = frozenset({
    "method_declaration", "constructor_declaration", "lambda_expression",
})
_BLOCK_TYPES = frozenset({"block", "constructor_body", "switch_block_statement_group"})

INTERFACE_FIELD_MODIFIERS = frozenset({"public", "static", "final"})
ENUM_CONSTANT_MODIFIERS = frozenset({"public", "static", "final"})


@dataclass
class Symbol:
    """A resolved declaration: variable, parameter, field or method."""
    name: str
    kind: str
    owner: Optional[str]
    declared_type: Optional[str] = None
    type_name: Optional[str] = None
    modifiers: FrozenSet[str] = frozenset()
    declaration: Optional[SourceNode] = None
    initializer: Optional[SourceNode] = None

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_constant(self) -> bool:
        """``static final`` fields are compile-time constants."""
        return self.is_final and self.is_static


def modifiers_of(node: SourceNode) -> FrozenSet[str]:
    mods = node.child_of_type("modifiers")
    if mods is None:
        return frozenset()
    return frozenset(c.text for c in mods.children
                     if c.type not in ("annotation", "marker_annotation"))


class SymbolTable:
    """Package, imports, declared types and scope lookup for one unit."""

    def __init__(self, root: SourceNode):
        self.root = root
        self.package = ""
        self.imports: Dict[str, str] = {}
        self.wildcard_imports: List[str] = []
        self.static_imports: Dict[str, str] = {}
        self.types: Dict[str, SourceNode] = {}
        self._simple_types: Dict[str, str] = {}
        self._type_by_key: Dict[Tuple[int, int, str], str] = {}
        self._lookup_cache: Dict[Tuple[str, Tuple[int, int, str]], Optional[Symbol]] = {}
        self._read_header()
        self._collect_types()
        logger.debug("Symbol table: package %r, %d import(s), %d type(s)",
                     self.package, len(self.imports), len(self.types))

    # ------------------------------------------------------------------------
    # Header and declared types
    # ------------------------------------------------------------------------

    def _read_header(self):
        for child in self.root.named_children:
            if child.type == "package_declaration":
                name = child.child_of_type("scoped_identifier", "identifier")
                if name is not None:
                    self.package = name.text
            elif child.type == "import_declaration":
                name = child.child_of_type("scoped_identifier", "identifier")
                if name is None:
                    continue
                is_static = child.child_of_type("static") is not None
                is_wildcard = child.child_of_type("asterisk") is not None
                if is_static and is_wildcard:
                    # on-demand static imports name no member to resolve
                    continue
                if is_static:
                    owner, _, member = name.text.rpartition(".")
                    self.static_imports[member] = owner
                elif is_wildcard:
                    self.wildcard_imports.append(name.text)
                else:
                    self.imports[simple_name(name.text)] = name.text

    def _collect_types(self):
        for decl in self.root.descendants(*TYPE_DECLARATION_TYPES):
            name = decl.field("name")
            if name is None:
                continue
            outer = [self._declared_name(a) for a in decl.ancestors()
                     if a.type in TYPE_DECLARATION_TYPES]
            parts = [self.package] if self.package else []
            parts.extend(n for n in reversed(outer) if n)
            parts.append(name.text)
            qualified = ".".join(parts)
            self.types[qualified] = decl
            self._type_by_key[decl.key] = qualified
            self._simple_types.setdefault(name.text, qualified)

    @staticmethod
    def _declared_name(decl: SourceNode) -> str:
        name = decl.field("name")
        return name.text if name is not None else ""

    def enclosing_type(self, node: SourceNode) -> Optional[str]:
        """Qualified name of the innermost named type declaration around ``node``."""
        if node.type in TYPE_DECLARATION_TYPES:
            return self._type_by_key.get(node.key)
        for ancestor in node.ancestors():
            if ancestor.type in TYPE_DECLARATION_TYPES:
                return self._type_by_key.get(ancestor.key)
        return None

    def supertypes(self, qualified: str) -> Tuple[str, ...]:
        """Direct supertypes of a type declared in this unit (empty otherwise)."""
        decl = self.types.get(qualified)
        if decl is None:
            return ()
        written: List[SourceNode] = []
        superclass = decl.field("superclass")
        if superclass is not None:
            written.extend(superclass.named_children[:1])
        for holder in (decl.field("interfaces"), decl.child_of_type("extends_interfaces")):
            if holder is None:
                continue
            type_list = holder.child_of_type("type_list")
            written.extend(type_list.named_children if type_list is not None else holder.named_children)
        result = []
        for type_node in written:
            resolved = self.qualify(type_node.text)
            if resolved and resolved != qualified:
                result.append(resolved)
        return tuple(result)

    # ------------------------------------------------------------------------
    # Type names
    # ------------------------------------------------------------------------

    def qualify(self, type_text: str) -> Optional[str]:
        """Fully qualify a type as written in source, or ``None`` if unknown."""
        name = normalize_type_text(type_text)
        if not name or name == "var":
            return None
        if name in PRIMITIVE_TYPES:
            return name
        head, sep, rest = name.partition(".")
        if sep:
            outer = self._qualify_simple(head)
            if outer:
                return f"{outer}.{rest}"
            # lower-case head: already a package-qualified name
            return name if head[:1].islower() else None
        return self._qualify_simple(name)

    def _qualify_simple(self, name: str) -> Optional[str]:
        if name in self._simple_types:
            return self._simple_types[name]
        if name in self.imports:
            return self.imports[name]
        if name in JAVA_LANG_TYPES:
            return f"java.lang.{name}"
        for package in self.wildcard_imports:
            candidate = f"{package}.{name}"
            if candidate in KNOWN_TYPES:
                return candidate
        return None

    # ------------------------------------------------------------------------
    # Variables and fields
    # ------------------------------------------------------------------------

    def lookup(self, name: str, at: SourceNode) -> Optional[Symbol]:
        """Find the variable, parameter or field named ``name`` visible at ``at``."""
        cache_key = (name, at.key)
        if cache_key not in self._lookup_cache:
            self._lookup_cache[cache_key] = self._lookup(name, at)
        return self._lookup_cache[cache_key]

    def _lookup(self, name: str, at: SourceNode) -> Optional[Symbol]:
        position = at.start_byte
        for scope in at.ancestors():
            kind = scope.type
            symbol = None
            if kind in _BLOCK_TYPES:
                for statement in scope.named_children:
                    if statement.start_byte >= position:
                        break
                    if statement.type == "local_variable_declaration":
                        symbol = self._declared_in(statement, name, "local")
                        if symbol:
                            break
            elif kind == "for_statement":
                for init in scope.fields("init"):
                    if init.type == "local_variable_declaration":
                        symbol = self._declared_in(init, name, "local")
                        if symbol:
                            break
            elif kind == "enhanced_for_statement":
                symbol = self._named_variable(scope, scope, name, "local")
            elif kind == "try_with_resources_statement":
                resources = scope.field("resources")
                for resource in resources.named_children if resources is not None else []:
                    if resource.type == "resource" and resource.start_byte < position:
                        symbol = self._named_variable(resource, resource, name, "resource",
                                                      initializer=resource.field("value"))
                        if symbol:
                            break
            elif kind == "catch_clause":
                param = scope.child_of_type("catch_formal_parameter")
                if param is not None:
                    symbol = self._named_variable(param, param, name, "parameter",
                                                  type_node=param.child_of_type("catch_type"))
            elif kind in CALLABLE_TYPES:
                symbol = self._parameter(scope, name)
            elif kind == "record_declaration":
                symbol = self._parameter(scope, name, kind="field")
            elif kind in TYPE_BODY_TYPES:
                symbol = self._field_in_body(scope, name)
                if symbol is None:
                    owner = self._type_of_body(scope)
                    if owner:
                        symbol = self._inherited_field(owner, name, set())
            if symbol is not None:
                return symbol
        return None

    def _named_variable(self, holder: SourceNode, declaration: SourceNode, name: str,
                        kind: str, type_node: Optional[SourceNode] = None,
                        initializer: Optional[SourceNode] = None) -> Optional[Symbol]:
        name_node = holder.field("name")
        if name_node is None or name_node.text != name:
            return None
        if type_node is None:
            type_node = holder.field("type")
        declared = type_node.text if type_node is not None else None
        return Symbol(
            name=name,
            kind=kind,
            owner=self.enclosing_type(holder),
            declared_type=declared,
            type_name=self.qualify(declared) if declared else None,
            modifiers=modifiers_of(holder),
            declaration=declaration,
            initializer=initializer,
        )

    def _declared_in(self, decl: SourceNode, name: str, kind: str,
                     implicit: FrozenSet[str] = frozenset()) -> Optional[Symbol]:
        """Symbol for ``name`` if one of ``decl``'s declarators declares it."""
        type_node = decl.field("type")
        declared = type_node.text if type_node is not None else None
        for declarator in decl.fields("declarator"):
            name_node = declarator.field("name")
            if name_node is not None and name_node.text == name:
                return Symbol(
                    name=name,
                    kind=kind,
                    owner=self.enclosing_type(decl),
                    declared_type=declared,
                    type_name=self.qualify(declared) if declared else None,
                    modifiers=modifiers_of(decl) | implicit,
                    declaration=declarator,
                    initializer=declarator.field("value"),
                )
        return None

    def declared_symbols(self, decl: SourceNode) -> List[Symbol]:
        """All symbols introduced by a local variable or field declaration."""
        symbols = []
        for declarator in decl.fields("declarator"):
            name_node = declarator.field("name")
            if name_node is None:
                continue
            symbol = self._declared_in(decl, name_node.text,
                                       "field" if decl.type == "field_declaration" else "local")
            if symbol is not None:
                symbols.append(symbol)
        return symbols

    def _parameter(self, callable_node: SourceNode, name: str,
                   kind: str = "parameter") -> Optional[Symbol]:
        params = callable_node.field("parameters")
        if params is None:
            return None
        if params.type == "identifier":
            candidates = [params]
        else:
            candidates = params.named_children
        for param in candidates:
            if param.type == "identifier":
                if param.text == name:
                    return Symbol(name=name, kind=kind,
                                  owner=self.enclosing_type(callable_node),
                                  declaration=param)
            elif param.type == "formal_parameter":
                symbol = self._named_variable(param, param, name, kind)
                if symbol:
                    return symbol
            elif param.type == "spread_parameter":
                declarator = param.child_of_type("variable_declarator")
                type_node = next((c for c in param.named_children
                                  if c.type not in ("modifiers", "variable_declarator")), None)
                if declarator is not None:
                    symbol = self._named_variable(declarator, param, name, kind, type_node=type_node)
                    if symbol:
                        symbol.modifiers = modifiers_of(param)
                        return symbol
        return None

    def _field_in_body(self, body: SourceNode, name: str) -> Optional[Symbol]:
        for member in body.named_children:
            symbol = None
            if member.type == "field_declaration":
                symbol = self._declared_in(member, name, "field")
            elif member.type == "constant_declaration":
                symbol = self._declared_in(member, name, "field", INTERFACE_FIELD_MODIFIERS)
            elif member.type == "enum_constant":
                name_node = member.field("name")
                if name_node is not None and name_node.text == name:
                    owner = self.enclosing_type(member)
                    symbol = Symbol(name=name, kind="field", owner=owner,
                                    declared_type=owner, type_name=owner,
                                    modifiers=ENUM_CONSTANT_MODIFIERS, declaration=member)
            elif member.type == "enum_body_declarations":
                symbol = self._field_in_body(member, name)
            if symbol is not None:
                return symbol
        return None

    def _type_of_body(self, body: SourceNode) -> Optional[str]:
        holder = body.parent
        if holder is not None and holder.type == "enum_body":
            holder = holder.parent
        if holder is not None and holder.type in TYPE_DECLARATION_TYPES:
            return self._type_by_key.get(holder.key)
        return None

    def _inherited_field(self, owner: str, name: str, seen: Set[str]) -> Optional[Symbol]:
        for parent in self.supertypes(owner):
            if parent in seen:
                continue
            seen.add(parent)
            symbol = self._field_of(parent, name, seen)
            if symbol is not None:
                return symbol
        return None

    def field_of(self, owner: str, name: str) -> Optional[Symbol]:
        """Field ``name`` of a type declared in this unit, following same-file supertypes."""
        return self._field_of(owner, name, {owner})

    def _field_of(self, owner: str, name: str, seen: Set[str]) -> Optional[Symbol]:
        decl = self.types.get(owner)
        if decl is None:
            return None
        if decl.type == "record_declaration":
            symbol = self._parameter(decl, name, kind="field")
            if symbol is not None:
                return symbol
        body = decl.field("body")
        symbol = self._field_in_body(body, name) if body is not None else None
        return symbol or self._inherited_field(owner, name, seen)

    def method_of(self, owner: str, name: str) -> Optional[Symbol]:
        """First method ``name`` declared by ``owner`` or its same-file supertypes."""
        seen = {owner}
        pending = [owner]
        while pending:
            current = pending.pop(0)
            decl = self.types.get(current)
            body = decl.field("body") if decl is not None else None
            if body is not None:
                members = list(body.named_children)
                nested = body.child_of_type("enum_body_declarations")
                if nested is not None:
                    members.extend(nested.named_children)
                for member in members:
                    if member.type != "method_declaration":
                        continue
                    name_node = member.field("name")
                    if name_node is None or name_node.text != name:
                        continue
                    type_node = member.field("type")
                    declared = type_node.text if type_node is not None else None
                    return Symbol(name=name, kind="method", owner=current,
                                  declared_type=declared,
                                  type_name=self.qualify(declared) if declared else None,
                                  modifiers=modifiers_of(member), declaration=member)
            for parent in self.supertypes(current):
                if parent not in seen:
                    seen.add(parent)
                    pending.append(parent)
        return None

    def resolve_reference(self, node: SourceNode) -> Optional[Symbol]:
        """Resolve an identifier or field access to the variable or field it names."""
        node = unwrap(node)
        if node is None:
            return None
        if node.type == "identifier":
            return self.lookup(node.text, node)
        if node.type != "field_access":
            return None
        target = unwrap(node.field("object"))
        member = node.field("field")
        if target is None or member is None:
            return None
        if target.type == "this":
            owner = self.enclosing_type(node)
            return self.field_of(owner, member.text) if owner else None
        if target.type == "super":
            owner = self.enclosing_type(node)
            parents = self.supertypes(owner) if owner else ()
            return self.field_of(parents[0], member.text) if parents else None
        if target.type in ("identifier", "field_access"):
            holder = self.resolve_reference(target)
            owner = holder.type_name if holder is not None else self.qualify(target.text)
            if owner:
                return self.field_of(owner, member.text)
        return None
