"""English singular/plural inflection for table names.

Table names derived here must match the ones the models declare, so the
irregular and uncountable lists follow the usual ORM inflector conventions.
"""

import re
from typing import List, Tuple

UNCOUNTABLE = frozenset(
    {
        "audio",
        "data",
        "education",
        "equipment",
        "feedback",
        "information",
        "knowledge",
        "metadata",
        "money",
        "news",
        "police",
        "series",
        "sheep",
        "species",
        "software",
        "traffic",
    }
)

IRREGULAR: List[Tuple[str, str]] = [
    ("person", "people"),
    ("man", "men"),
    ("woman", "women"),
    ("child", "children"),
    ("tooth", "teeth"),
    ("foot", "feet"),
    ("goose", "geese"),
    ("mouse", "mice"),
    ("ox", "oxen"),
    ("leaf", "leaves"),
    ("criterion", "criteria"),
    ("medium", "media"),
    ("move", "moves"),
    ("cookie", "cookies"),
    ("movie", "movies"),
]

_PLURAL_RULES: List[Tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"(matr|vert|ind)(ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh|zz)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive)$", r"\1s"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat|potat|her|ech)o$", r"\1oes"),
    (r"(bu|campu)s$", r"\1ses"),
    (r"(alias|status|virus)$", r"\1es"),
    (r"(octop)us$", r"\1i"),
    (r"(us)$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
]

_SINGULAR_RULES: List[Tuple[str, str]] = [
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"(alias|status|virus)(es)?$", r"\1"),
    (r"(octop)(us|i)$", r"\1us"),
    (r"(cris|test)es$", r"\1is"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(bus|campus)(es)?$", r"\1"),
    (r"([ml])ice$", r"\1ouse"),
    (r"(x|ch|ss|sh|zz)es$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(s)eries$", r"\1eries"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"(tive)s$", r"\1"),
    (r"(hive)s$", r"\1"),
    (r"([^f])ves$", r"\1fe"),
    (r"(^analy)(sis|ses)$", r"\1sis"),
    (r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)(sis|ses)$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"(n)ews$", r"\1ews"),
    (r"(ss)$", r"\1"),
    (r"(us)$", r"\1"),
    (r"s$", ""),
]

_SINGULAR_TO_PLURAL = {singular: plural for singular, plural in IRREGULAR}
_PLURAL_TO_SINGULAR = {plural: singular for singular, plural in IRREGULAR}


def _split_last_word(name: str) -> Tuple[str, str]:
    """Split ``base_invoices`` into ``("base_", "invoices")``."""
    match = re.match(r"^(.*?[_\-\s]?)([A-Za-z]+)$", name)
    if not match:
        return "", name
    return match.group(1), match.group(2)


def _apply(word: str, rules: List[Tuple[str, str]]) -> str:
    for pattern, replacement in rules:
        if re.search(pattern, word, flags=re.IGNORECASE):
            return re.sub(pattern, replacement, word, count=1, flags=re.IGNORECASE)
    return word


def _match_case(source: str, result: str) -> str:
    if source.isupper():
        return result.upper()
    if source[:1].isupper():
        return result[:1].upper() + result[1:]
    return result


def pluralize(name: str) -> str:
    """
    Pluralize the last word of a snake_case name.

    Names that are already plural are returned unchanged.

    Example:
        >>> pluralize("base_invoice")
        'base_invoices'
        >>> pluralize("country")
        'countries'
    """
    if not name:
        return name
    prefix, word = _split_last_word(name)
    lower = word.lower()
    if lower in UNCOUNTABLE or lower in _PLURAL_TO_SINGULAR:
        return name
    if lower in _SINGULAR_TO_PLURAL:
        return prefix + _match_case(word, _SINGULAR_TO_PLURAL[lower])
    if singularize(word).lower() != lower:
        return name
    return prefix + _apply(word, _PLURAL_RULES)


def singularize(name: str) -> str:
    """
    Singularize the last word of a snake_case name.

    Example:
        >>> singularize("countries")
        'country'
        >>> singularize("base_invoices")
        'base_invoice'
    """
    if not name:
        return name
    prefix, word = _split_last_word(name)
    lower = word.lower()
    if lower in UNCOUNTABLE:
        return name
    if lower in _PLURAL_TO_SINGULAR:
        return prefix + _match_case(word, _PLURAL_TO_SINGULAR[lower])
    if lower in _SINGULAR_TO_PLURAL:
        return name
    return prefix + _apply(word, _SINGULAR_RULES)
