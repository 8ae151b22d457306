"""Accept-Language normalisation.

When a request arrives without an ``Accept-Language`` header, the
locale is taken from the ``locale`` query parameter, or from the
configured default, and injected as the header.
"""

import logging
import re
from dataclasses import dataclass

from perch.errors import ConfigurationError
from perch.http.request import Request

logger = logging.getLogger("perch.filters")

_TAG_RE = re.compile(r"^[A-Za-z]{2,8}(?:[-_][A-Za-z0-9]{1,8})*$")
_SEP_RE = re.compile(r"[-_]")


def canonical_language_tag(tag: str) -> str | None:
    """Canonicalise a BCP 47 language tag, or ``None`` if malformed.

    Language is lowercased, a four-letter script title-cased and a
    region uppercased. Everything after a singleton (``x-``, ``u-``)
    is lowercased::

        canonical_language_tag("fr_fr")       -> "fr-FR"
        canonical_language_tag("zh-hant-tw")  -> "zh-Hant-TW"
        canonical_language_tag("es-419")      -> "es-419"
    """
    tag = tag.strip()
    if not _TAG_RE.match(tag):
        return None
    language, *subtags = _SEP_RE.split(tag)
    parts = [language.lower()]
    extension = False
    for position, sub in enumerate(subtags):
        if extension:
            parts.append(sub.lower())
        elif len(sub) == 1:
            extension = True
            parts.append(sub.lower())
        elif position == 0 and len(sub) == 4 and sub.isalpha():
            parts.append(sub.title())
        elif (len(sub) == 2 and sub.isalpha()) or (len(sub) == 3 and sub.isdigit()):
            parts.append(sub.upper())
        else:
            parts.append(sub.lower())
    return "-".join(parts)


def _present_languages(request: Request) -> list[str]:
    values = request.headers.get_list("accept-language")
    return [v.strip() for v in values if v.strip()]


@dataclass(frozen=True, slots=True)
class LocaleNormalizer:
    """Inject ``Accept-Language`` when the client did not send one.

    Resolution order: existing header (left untouched), then the first
    ``locale`` query parameter, then ``default_locale``. A malformed
    query value falls back to the default.

    Usage::

        gateway.add_route("shop", "**.example.com", "/shop/**", "http://shop:8000",
                          filters=[LocaleNormalizer("en-US")])
    """

    default_locale: str = "en-US"
    param: str = "locale"

    def __post_init__(self) -> None:
        canonical = canonical_language_tag(self.default_locale)
        if canonical is None:
            msg = f"Invalid default locale {self.default_locale!r}."
            raise ConfigurationError(msg)
        object.__setattr__(self, "default_locale", canonical)

    def resolve(self, request: Request) -> str:
        """The locale to inject for a request that has none."""
        requested = request.query.get(self.param)
        if requested is not None:
            canonical = canonical_language_tag(requested)
            if canonical is not None:
                return canonical
            logger.debug("Ignoring malformed %s=%r", self.param, requested)
        return self.default_locale

    def __call__(self, request: Request) -> Request:
        languages = _present_languages(request)
        if not languages:
            locale = self.resolve(request)
            request = request.with_header("Accept-Language", locale)
            languages = [locale]
        logger.info("Request contains Accept-Language header: %s", ",".join(languages))
        return request
