from __future__ import annotations

from typing import Protocol

from bs4 import BeautifulSoup
from nltk.tokenize.punkt import PunktSentenceTokenizer


class HtmlExtractor(Protocol):
    def extract_text(self, markup: str) -> str: ...


class SentenceSegmenter(Protocol):
    def split(self, text: str) -> list[str]: ...


class SoupHtmlExtractor:
    def __init__(self, *, parser: str = "html.parser") -> None:
        self._parser = parser

    def extract_text(self, markup: str) -> str:
        soup = BeautifulSoup(markup, self._parser)
        return " ".join(soup.get_text(" ").split())


class PunktSentenceSegmenter:
    """Punkt with default parameters; no trained model has to be downloaded."""

    def __init__(self) -> None:
        self._tokenizer = PunktSentenceTokenizer()

    def split(self, text: str) -> list[str]:
        return [sentence.strip() for sentence in self._tokenizer.tokenize(text) if sentence.strip()]
