from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QuoteRecord:
    """One saved quote as stored in the `line` table."""

    id: int
    quote_text: str
    author_name: str

    @classmethod
    def from_row(cls, row) -> "QuoteRecord":
        return cls(
            id=int(row["id"]),
            quote_text=row["quote"] if row["quote"] is not None else "",
            author_name=row["author"] if row["author"] is not None else "",
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "quote": self.quote_text, "author": self.author_name}


@dataclass(frozen=True)
class QuoteCandidate:
    """Currently displayed remote quote, not persisted until saved."""

    quote_text: str = ""
    author_name: str = ""

    def to_dict(self) -> dict:
        return {"quote": self.quote_text, "author": self.author_name}


@dataclass(frozen=True)
class QuoteDraft:
    """In-progress user-authored quote from the add form."""

    quote_text: str = ""
    author_name: str = ""

    def to_dict(self, max_length: int) -> dict:
        return {
            "quote": self.quote_text,
            "author": self.author_name,
            "quote_length": len(self.quote_text),
            "quote_max_length": max_length,
        }


def truncate_quote(text: str | None, max_length: int) -> str:
    """Cap authored quote text the way the add form's input does."""
    text = text or ""
    if max_length <= 0:
        return text
    return text[:max_length]
