"""Parsing and date filtering of tab separated post/comment records.

A record line looks like::

    title <TAB> reply_flag <TAB> dd-MM-yyyy <TAB> comment

An empty reply_flag marks a reply to another post.
"""
import calendar
import re
from collections import namedtuple
from datetime import date

from job_config import CUTOFF_DATE_RAW
from job_config import DATE_FORMAT_DESCRIPTION
from job_config import FIELD_SEPARATOR
from job_config import HEADER_MARKERS
from job_config import MIN_FIELDS

DATE_RE = re.compile(r'([0-9]{2})-([0-9]{2})-([0-9]{4})')


class CountWordsError(Exception):
    """Base class for errors raised by the word count job"""


class MalformedRecordError(CountWordsError, ValueError):
    """A single input line that can't be turned into a Record"""

    def __init__(self, reason, line=None):
        super(MalformedRecordError, self).__init__(reason)
        self.reason = reason
        self.line = line


Record = namedtuple('Record', ['title', 'reply_flag', 'date_raw', 'comment', 'date'])


def is_header_line(line):
    return all(marker in line for marker in HEADER_MARKERS)


def split_fields(line):
    """
    Split a line on tabs, dropping trailing empty fields
    """
    fields = line.split(FIELD_SEPARATOR)
    while fields and not fields[-1]:
        fields.pop()
    return fields


def parse_date(date_raw):
    """
    Parse a dd-MM-yyyy string into a date.

    Days 29 to 31 that don't exist in their month resolve to the last
    day of that month, so 31-04-2019 is 30-04-2019.
    """
    match = DATE_RE.fullmatch(date_raw)
    if not match:
        raise MalformedRecordError('date %r does not match %s'
                                   % (date_raw, DATE_FORMAT_DESCRIPTION))
    day, month, year = (int(group) for group in match.groups())
    if year < 1 or not 1 <= month <= 12 or not 1 <= day <= 31:
        raise MalformedRecordError('date %r is out of range' % date_raw)
    day = min(day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


CUTOFF_DATE = parse_date(CUTOFF_DATE_RAW)


def parse_line(line):
    """
    Turn one raw input line into a Record.

    Returns None for header lines. Raises MalformedRecordError when the
    line has too few fields or an unparseable date.
    """
    if is_header_line(line):
        return None

    fields = split_fields(line)
    if len(fields) < MIN_FIELDS:
        raise MalformedRecordError('expected at least %d fields, got %d'
                                   % (MIN_FIELDS, len(fields)), line)

    title, reply_flag, date_raw, comment = fields[:MIN_FIELDS]
    try:
        parsed = parse_date(date_raw)
    except MalformedRecordError as e:
        e.line = line
        raise
    return Record(title, reply_flag, date_raw, comment, parsed)


def is_before_cutoff(record, cutoff=CUTOFF_DATE):
    return record.date < cutoff
