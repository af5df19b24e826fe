"""
Parsing of user-supplied package specifiers.

Accepts ``name``, ``name@version``, ``@scope/name`` and
``@scope/name@version``.
"""

from .domain.package import PackageSpec


def parse_package_spec(spec: str) -> PackageSpec:
    """Split a specifier into package name and optional version.

    The split happens on the last ``@`` that is not the leading scope marker.
    Anything that does not fit is returned as a bare name.
    """
    text = (spec or "").strip()

    # Leading '@' belongs to the scope, never to the version
    at = text.rfind("@")
    if at <= 0:
        return PackageSpec(name=text)

    name, version = text[:at], text[at + 1:].strip()
    if not name or name == "@":
        return PackageSpec(name=text)

    return PackageSpec(name=name, version=version or None)
