#!/usr/bin/env python3
"""
Name: cal
Description: displays a calendar, with optional week numbers
Author: Anton Sixtenson

Prints the current month, a run of months or a whole year, three months
side by side, with the current date highlighted.
"""

import sys
import argparse
from datetime import date
from typing import Callable, NamedTuple, Optional

__version__ = "1.0.0"

PROGRAM = "cal"

MONTH_NAMES = ("January", "February", "March", "April", "May", "June", "July",
               "August", "September", "October", "November", "December")
DAY_NAMES = "Su Mo Tu We Th Fr Sa"
MONTH_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Black on white for the current day, then reset.
HIGHLIGHT_ON = "\033[30m\033[47m"
HIGHLIGHT_OFF = "\033[0m"

MONTH_WIDTH = 20
YEAR_WIDTH = 64
YEAR_WIDTH_WEEKS = 78


class CalendarDate(NamedTuple):
    """A day of the calendar. Months are 0-indexed (January = 0)."""
    day: int
    month: int
    year: int


# The local date is read once; every later call sees the same day.
_today_cache = None

def current_date() -> CalendarDate:
    """Returns the cached local date."""
    global _today_cache
    if _today_cache is None:
        now = date.today()
        _today_cache = CalendarDate(now.day, now.month - 1, now.year)
    return _today_cache


# --- Core Date Calculation Functions ---

def _check_date(year: int, month: int = 0):
    if year < 1:
        raise ValueError(f"invalid year {year}")
    if not 0 <= month <= 11:
        raise ValueError(f"invalid month {month}")

def is_leap_year(year: int) -> bool:
    """Determines if a year is a leap year under the Gregorian rules."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0

def month_days(year: int) -> tuple:
    """Returns the 12-entry table of month lengths for the given year."""
    if is_leap_year(year):
        return MONTH_DAYS[:1] + (29,) + MONTH_DAYS[2:]
    return MONTH_DAYS

def days_in_month(year: int, month: int) -> int:
    """Returns the number of days in a given month for a given year."""
    _check_date(year, month)
    return month_days(year)[month]

def month_start_day(year: int, month: int, days: Optional[tuple] = None) -> int:
    """
    Calculates the weekday (0=Sun, 1=Mon...6=Sat) of the first day of a month.

    Counts the days elapsed since 1 January of year 1, which was a Monday.
    `days` is the month-length table for `year`; it is derived when omitted.
    """
    _check_date(year, month)
    if days is None:
        days = month_days(year)
    total_days = 1
    total_days += (year - 1) * 365
    total_days += (year - 1) // 4 + (year - 1) // 400 - (year - 1) // 100
    total_days += sum(days[:month])
    return total_days % 7

def month_start_week(year: int, month: int, days: Optional[tuple] = None) -> int:
    """
    Calculates the week number of the first day of a month.

    Week 1 is the week holding 1 January; weeks run Sunday to Saturday and
    the count restarts every year.
    """
    if days is None:
        days = month_days(year)
    total_days = month_start_day(year, 0, days) + sum(days[:month])
    return 1 + total_days // 7

def year_char_len(year: int) -> int:
    """Number of characters in the printed year (2022 gives 4)."""
    return len(str(year))


# --- Highlighting ---

Highlighter = Callable[[str], str]

def ansi_highlight(text: str) -> str:
    """Marks text with terminal colors."""
    return f"{HIGHLIGHT_ON}{text}{HIGHLIGHT_OFF}"

def no_highlight(text: str) -> str:
    return text


# --- Formatting and Display Functions ---

def _padding(length: int, width: int) -> tuple:
    """Splits the free space around a title; an odd column goes to the right."""
    free = max(width - length, 0)
    return free // 2, free // 2 + free % 2

def format_heading(year: int, start_month: int, count: int,
                   week_numbers: bool, show_year: bool) -> str:
    """Builds the month-name row and the day-name row."""
    extra = 1 if week_numbers else 0

    titles = []
    for name in MONTH_NAMES[start_month:start_month + count]:
        length = len(name)
        if show_year:
            name += f" {year}"
            length += year_char_len(year) + 1
        left, right = _padding(length, MONTH_WIDTH)
        titles.append(" " * (left + 3 * extra) + name + " " * (right + 2 + extra))

    week_column = "   " if week_numbers else ""
    day_row = (week_column + DAY_NAMES + " " * (2 + extra)) * count
    return "".join(titles) + "\n" + day_row + "\n"

def format_day_numbers(year: int, start_month: int, count: int, week_numbers: bool,
                       days: tuple, today: CalendarDate, highlight: Highlighter) -> str:
    """
    Lays out the day numbers of `count` months side by side.

    One cursor walks the months left to right, printing at most one week of
    the current month before moving on; after the last month it starts a new
    line. Months that run out of days keep their column filled with blanks
    until every month has printed its last day.
    """
    months = range(start_month, start_month + count)
    start_day = [month_start_day(year, m, days) for m in months]
    week = [month_start_week(year, m, days) for m in months]
    remaining = [days[m] for m in months]
    separator = " " * (2 if week_numbers else 1)

    out = []
    cursor = 0
    column = 0
    while any(remaining):
        month = start_month + cursor

        if week_numbers and column == 0:
            if remaining[cursor] > 0:
                out.append(f"{week[cursor]:2d} ")
                week[cursor] += 1
            else:
                out.append("   ")

        if start_day[cursor] > 0:
            # Blank cells before the first of the month
            out.append("   " * start_day[cursor])
            column = start_day[cursor]
            start_day[cursor] = 0
        elif remaining[cursor] == 0:
            out.append("   " * (7 - column))
            column = 7
        else:
            day = days[month] - remaining[cursor] + 1
            cell = f"{day:2d}"
            if (today.year, today.month, today.day) == (year, month, day):
                cell = highlight(cell)
            out.append(cell + " ")
            remaining[cursor] -= 1
            column += 1

        if column == 7:
            if cursor < count - 1:
                out.append(separator)
                cursor += 1
            else:
                out.append("\n")
                cursor = 0
            column = 0

    out.append("\n")
    return "".join(out)

def render_months(year: int, start_month: int, count: int, week_numbers: bool = False,
                  show_year: bool = False, today: Optional[CalendarDate] = None,
                  highlight: Highlighter = ansi_highlight) -> str:
    """Formats one row of up to three months: headings, day names and days."""
    _check_date(year, start_month)
    if not 1 <= count <= 3 or start_month + count > 12:
        raise ValueError(f"invalid month count {count}")
    if today is None:
        today = current_date()

    days = month_days(year)
    return (format_heading(year, start_month, count, week_numbers, show_year) +
            format_day_numbers(year, start_month, count, week_numbers, days, today, highlight))

def render_year(year: int, week_numbers: bool = False, today: Optional[CalendarDate] = None,
                highlight: Highlighter = ansi_highlight) -> str:
    """Formats an entire year, three months per row, under a year heading."""
    _check_date(year)
    width = YEAR_WIDTH_WEEKS if week_numbers else YEAR_WIDTH
    left, _ = _padding(year_char_len(year), width)

    parts = ["\n", " " * left, str(year), "\n\n"]
    for quarter in range(4):
        parts.append(render_months(year, quarter * 3, 3, week_numbers, False, today, highlight))
        parts.append("\n")
    return "".join(parts)

def run(year: int = 0, month: int = -1, count: int = 0, week_numbers: bool = False,
        today: Optional[CalendarDate] = None, highlight: Highlighter = ansi_highlight) -> str:
    """
    Works out what to print from the (possibly partial) options.

    year 0, month -1 and count 0 mean "not given". A year without a month
    prints the whole year. Otherwise missing values default to today, a count
    of 12 prints the whole year and runs never go past December.
    """
    if today is None:
        today = current_date()

    if year > 0 and month < 0:
        return render_year(year, week_numbers, today, highlight)

    if year < 1:
        year = today.year
    if month < 0:
        month = today.month
    _check_date(year, month)

    if count == 12:
        return render_year(year, week_numbers, today, highlight)
    elif month + count > 12:
        count = 12 - month
    elif count < 1:
        count = 1

    if count > 3:
        parts = []
        while count > 3:
            parts.append("\n")
            parts.append(render_months(year, month, 3, week_numbers, False, today, highlight))
            month += 3
            count -= 3
        parts.append("\n")
        parts.append(render_months(year, month, count, week_numbers, False, today, highlight))
        return "".join(parts)

    return render_months(year, month, count, week_numbers, count == 1, today, highlight)


# --- Command Line ---

def usage(exit_code):
    """Prints the usage message and exits with the given code."""
    help_message = f"""How to use:
{PROGRAM} [options]

Running program without arguments will print current month

Options:
 -y <num>\tYear to print
\t\t  Note: Prints whole year if -m is not specified
 -m <num>\tMonth to print
\t\t  Note: January = 0
 -w\t\tPrint week numbers
 -n <num>\tNumber of months to print
\t\t  Note: Will only print until end of year
\t\t\tStarts from current month if -m is not specified
\t\t\tPrints whole year if used with -y without -m
 -h\t\tDisplay this help page"""
    print(help_message)
    sys.exit(exit_code)

class CalArgumentParser(argparse.ArgumentParser):
    """Bad options are not an error for cal: show the help page instead."""
    def error(self, message):
        usage(0)

def main(argv=None):
    """Parses arguments and displays the appropriate calendar."""
    parser = CalArgumentParser(prog=PROGRAM, add_help=False)
    parser.add_argument('-h', dest='help', action='store_true', help="Display this help page")
    parser.add_argument('-w', dest='week_numbers', action='store_true', help="Print week numbers")
    parser.add_argument('-y', dest='year', type=int, default=0, help="Year to print")
    parser.add_argument('-m', dest='month', type=int, default=-1, help="Month to print (January = 0)")
    parser.add_argument('-n', dest='count', type=int, default=0, help="Number of months to print")

    args = parser.parse_args(argv)
    if args.help:
        usage(0)

    try:
        output = run(args.year, args.month, args.count, args.week_numbers)
    except ValueError as e:
        print(f"{PROGRAM}: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        sys.stdout.write(output)
        sys.stdout.flush()
    except (BrokenPipeError, KeyboardInterrupt):
        sys.stderr.close() # Silence errors on broken pipe or Ctrl+C
        sys.exit(1)

if __name__ == "__main__":
    main()
