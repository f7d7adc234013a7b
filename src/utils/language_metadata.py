"""Language metadata for MediaWiki sites.

Provides the two-letter code packing used for language ids and the
right-to-left language table.
"""

# ISO 639-1 codes of languages written right to left
RTL_LANGUAGE_CODES: frozenset[str] = frozenset({
    "ar",  # Arabic
    "arc",  # Aramaic
    "ckb",  # Sorani
    "dv",  # Divehi
    "fa",  # Persian
    "he",  # Hebrew
    "ks",  # Kashmiri
    "ku",  # Kurdish
    "ps",  # Pashto
    "sd",  # Sindhi
    "ug",  # Uyghur
    "ur",  # Urdu
    "yi",  # Yiddish
})


def code2_to_int(code: str) -> int:
    """Pack a two-letter language code into an integer id (0 if invalid)."""
    if len(code) != 2 or not code.isascii() or not code.isalpha():
        return 0
    code = code.lower()
    return ord(code[0]) + (ord(code[1]) << 8)


def language_code_from_url(url: str) -> str | None:
    """Guess the site language from a wiki URL such as ``https://en.wikipedia.org/w``.

    The two characters before the first dot are taken as the code when they
    start the host name.
    """
    n = url.find(".")
    if n == 2 or (n > 3 and url[n - 3] == "/"):
        code = url[n - 2:n]
        if code2_to_int(code):
            return code.lower()
    return None


def is_rtl_language(code: str | None) -> bool:
    return code in RTL_LANGUAGE_CODES
