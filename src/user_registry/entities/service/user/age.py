"""Age in whole years, shared by validation and the response projection."""

from datetime import date

MINIMUM_AGE = 18


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """Whole years between ``date_of_birth`` and ``today``.

    One year is taken off when this year's birthday has not happened yet.
    Birth dates in the future give 0.
    """
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return max(age, 0)
