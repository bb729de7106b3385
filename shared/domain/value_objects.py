"""
Common Value Objects

Value objects used across the property domain:
- BookingInterval: A booked stay on an accommodation (book-in to book-out)
"""

from dataclasses import dataclass
from datetime import date

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class BookingInterval(ValueObject):
    """
    Booking interval value object

    Represents a stay from book_in (inclusive) to book_out (exclusive).
    Accommodations keep a list of these sorted by book_in.
    """
    book_in: date
    book_out: date

    def __post_init__(self):
        if self.book_in >= self.book_out:
            raise ValueError(f"Book-in ({self.book_in}) must be before book-out ({self.book_out})")

    @classmethod
    def from_dict(cls, data: dict) -> 'BookingInterval':
        """
        Build an interval from its stored form

        Stored intervals look like {"book_in": "2024-01-10", "book_out": "2024-01-15"}.
        Date objects are accepted as well.
        """
        book_in = data["book_in"]
        book_out = data["book_out"]
        if isinstance(book_in, str):
            book_in = date.fromisoformat(book_in)
        if isinstance(book_out, str):
            book_out = date.fromisoformat(book_out)
        return cls(book_in=book_in, book_out=book_out)

    def to_dict(self) -> dict:
        return {
            'book_in': self.book_in.isoformat(),
            'book_out': self.book_out.isoformat(),
        }

    def __len__(self) -> int:
        """Number of nights in the interval"""
        return (self.book_out - self.book_in).days

    def __str__(self):
        return f"{self.book_in.strftime('%d.%m.%Y')} - {self.book_out.strftime('%d.%m.%Y')}"
