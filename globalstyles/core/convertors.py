"""
Path parameter grammars for global styles routes.

Registered as Starlette convertors so that a path outside a grammar does not
match the route at all, and routing moves on to the next candidate route.
Importing this module registers the convertors; it must be imported before
routes using them are declared.
"""

from starlette.convertors import Convertor, register_url_convertor


class GlobalStylesIdConvertor(Convertor):
    """Item id segment. Slashes are allowed so that unmatched theme paths land here."""

    regex = r"[/\w-]+"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return str(value)


class ThemeStylesheetConvertor(Convertor):
    """
    Theme directory reference: one segment, or two separated by "/".

    Segments exclude characters that are invalid in directory names on
    common filesystems: / : < > * ? " |
    """

    regex = r'[^/:<>*?"|]+(?:/[^/:<>*?"|]+)?'

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


class VariationsStylesheetConvertor(Convertor):
    """Theme directory reference in the style variations route."""

    regex = r"[/\s%\w.()\[\]@_-]+"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("global_styles_id", GlobalStylesIdConvertor())
register_url_convertor("stylesheet", ThemeStylesheetConvertor())
register_url_convertor("variations_stylesheet", VariationsStylesheetConvertor())
