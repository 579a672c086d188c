"""
Glyphbin Backend — Syntax Highlighter
======================================

What:  Converts raw paste text into syntax-highlighted HTML with per-line anchors.
Why:   Rendering happens once per submission; the stored HTML is what every
       later reader sees.
How:   Pygments supplies the grammars (lexers) and themes (styles). The
       catalog of names is built once in __init__ and exposed read-only.
       Lexer instances are created per render call, so concurrent requests
       never share mutable lexer state.
Who:   Built by the lifespan handler in main.py, held on app.state, and
       passed to PasteService.

Output Format:
    <pre class="contents" style="background-color:#272822;color:#f8f8f2">
    <a id="L1" href="#L1" class="line"></a><span style="color: #66d9ef">def</span> f():
    <a id="L2" href="#L2" class="line"></a>    ...
    </pre>

    (Shown wrapped for readability; the real output has no newline after the
    opening <pre> tag. Every line, including the last, ends with "\\n".)

    - Each line starts with an empty anchor `L<n>` so `/paste/<id>#L12` links
      to line 12.
    - Line bodies come from Pygments' HtmlFormatter with inline styles, so
      the stored HTML needs no stylesheet.
    - Plain text tokens carry no <span>; they inherit the foreground color
      from the <pre>. Plain Text pastes therefore contain no spans at all.

Fallback Policy:
    An unknown language name renders with the "Plain Text" grammar. This is
    not an error: the submit form accepts free text and the stored label is
    kept as typed.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Type

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import find_lexer_class, get_all_lexers
from pygments.lexers.special import TextLexer
from pygments.style import Style
from pygments.styles import get_all_styles, get_style_by_name
from pygments.token import Token

from glyphbin.exceptions import UnknownThemeError

logger = logging.getLogger(__name__)

PLAIN_TEXT = "Plain Text"
DEFAULT_BACKGROUND = "ffffff"

# Pygments calls its plain text lexer "Text only"
_PYGMENTS_PLAIN_TEXT = TextLexer.name


def _hex_color(value: Optional[str], default: Optional[str] = None) -> Optional[str]:
    """
    Normalizes a Pygments color value to six lowercase hex digits.

    Accepts "#rrggbb", "#rgb" and the same without "#". Anything else
    (None, "", "inherit", "var(...)") yields `default`.
    """
    if not value:
        return default
    digits = value.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6:
        return default
    try:
        int(digits, 16)
    except ValueError:
        return default
    return digits.lower()


class Highlighter:
    """
    Process-wide grammar/theme catalog plus the rendering routine.

    Immutability:
        _grammars, _lookup and _themes are MappingProxyType views built in
        __init__ and never written again. render() only reads them, which is
        why one instance can serve every request without locking.

    Raises:
        UnknownThemeError: from __init__ if default_theme is not a Pygments
        style, and from render() if an explicit theme_name is unknown.
    """

    def __init__(self, default_theme: str):
        grammars: Dict[str, str] = {}  # catalog name -> Pygments lexer name
        lookup: Dict[str, str] = {}    # lowercase name/alias -> catalog name

        lexers = sorted(get_all_lexers(), key=lambda entry: entry[0])
        for name, _aliases, _filenames, _mimetypes in lexers:
            display = PLAIN_TEXT if name == _PYGMENTS_PLAIN_TEXT else name
            grammars.setdefault(display, name)
            lookup.setdefault(display.lower(), display)
        # Names win over aliases when both spell the same thing
        for name, aliases, _filenames, _mimetypes in lexers:
            display = PLAIN_TEXT if name == _PYGMENTS_PLAIN_TEXT else name
            for alias in aliases:
                lookup.setdefault(alias.lower(), display)

        themes = {name: get_style_by_name(name) for name in sorted(get_all_styles())}

        self._grammars: Mapping[str, str] = MappingProxyType(grammars)
        self._lookup: Mapping[str, str] = MappingProxyType(lookup)
        self._themes: Mapping[str, Type[Style]] = MappingProxyType(themes)

        if default_theme not in self._themes:
            raise UnknownThemeError(default_theme, context={"known": sorted(self._themes)})
        self.default_theme = default_theme

        logger.info(
            "Highlighter ready: %d grammars, %d themes, default theme '%s'",
            len(self._grammars), len(self._themes), default_theme,
        )

    # ── Catalog Accessors ─────────────────────────────────────────────────

    def list_languages(self) -> List[str]:
        """Grammar names for the submit form, sorted case-insensitively."""
        return sorted(self._grammars, key=str.lower)

    def resolve_language(self, language_name: str) -> str:
        """
        Maps a submitted language label to a catalog grammar name.

        Exact grammar names match first, then case-insensitive names and
        lexer aliases ("python", "py", "js"). Everything else is Plain Text.
        """
        if language_name in self._grammars:
            return language_name
        key = (language_name or "").strip().lower()
        return self._lookup.get(key, PLAIN_TEXT)

    # ── Rendering ─────────────────────────────────────────────────────────

    def render(self, text: str, language_name: str, theme_name: Optional[str] = None) -> str:
        """
        Renders `text` as highlighted HTML.

        Args:
            text: Raw paste text. "\\r\\n" and "\\r" terminators are treated
                  as "\\n" and a leading byte-order mark is dropped. An
                  unterminated last line still counts as a line.
            language_name: Grammar name or alias; unknown names fall back to
                  Plain Text.
            theme_name: Pygments style name; defaults to the configured theme.

        Returns:
            A single <pre> element. Identical arguments always produce
            byte-identical output.
        """
        style = self._style(theme_name or self.default_theme)
        lexer = self._lexer(self.resolve_language(language_name))

        background = _hex_color(style.background_color, DEFAULT_BACKGROUND)
        container = f"background-color:#{background}"
        foreground = _hex_color(style.style_for_token(Token.Text)["color"])
        if foreground:
            container += f";color:#{foreground}"

        parts = [f'<pre class="contents" style="{container}">']
        for number, line in enumerate(self._format_lines(text, lexer, style), start=1):
            parts.append(f'<a id="L{number}" href="#L{number}" class="line"></a>{line}\n')
        parts.append("</pre>")
        return "".join(parts)

    # ── Internals ─────────────────────────────────────────────────────────

    def _style(self, theme_name: str) -> Type[Style]:
        try:
            return self._themes[theme_name]
        except KeyError:
            raise UnknownThemeError(theme_name) from None

    def _lexer(self, grammar: str) -> Lexer:
        lexer_cls = find_lexer_class(self._grammars[grammar]) or TextLexer
        # stripnl=False keeps leading/trailing blank lines;
        # ensurenl=True makes every line, including the last, end in "\n"
        return lexer_cls(stripnl=False, ensurenl=True)

    @staticmethod
    def _format_lines(text: str, lexer: Lexer, style: Type[Style]) -> List[str]:
        """Highlights `text` and returns one HTML fragment per source line."""
        if not text:
            return []
        # nowrap: bare lines, no <div>/<pre>; noclasses: inline style="..."
        # Spans never cross a "\n", so the output splits cleanly per line.
        formatter = HtmlFormatter(style=style, noclasses=True, nowrap=True)
        body = highlight(text, lexer, formatter)
        return body.split("\n")[:-1]
