"""Emit, combine and reduce (word, count) pairs.

These are plain functions so the same logic runs inline, in a process
pool or inside an mrjob step.
"""
import logging
from collections import defaultdict

from mrjob.util import log_to_stream

from job_config import LOG_FORMAT
from post_records import CUTOFF_DATE
from post_records import MalformedRecordError
from post_records import is_before_cutoff
from post_records import parse_line
from tokenizer import tokenize

LOG = logging.getLogger('CountWords')

ONE = 1


def set_up_logging(debug=False):
    """
    Attach the stderr handler to LOG once. Later calls only change the level.
    """
    level = logging.DEBUG if debug else logging.INFO
    if not LOG.handlers:
        log_to_stream(format=LOG_FORMAT, name=LOG.name, debug=debug)
        return
    LOG.setLevel(level)
    for handler in LOG.handlers:
        handler.setLevel(level)


def emit_words(record):
    """
    Yield (word, 1) for each comment token, and for each title token when
    the record has a reply flag. Replies (empty flag) carry no real title.
    """
    for word in tokenize(record.comment):
        yield word, ONE
    if record.reply_flag != '':
        for word in tokenize(record.title):
            yield word, ONE


def process_line(line, cutoff=CUTOFF_DATE):
    """
    Return the (word, 1) pairs contributed by one raw input line.

    Header lines, malformed lines and records dated on or after cutoff
    contribute nothing.
    """
    try:
        record = parse_line(line)
    except MalformedRecordError as e:
        LOG.info('Skipping malformed record: %s', e.reason)
        return []
    if record is None or not is_before_cutoff(record, cutoff):
        return []
    return list(emit_words(record))


def combine(word, counts):
    return word, sum(counts)


def combine_pairs(pairs):
    """
    Sum a batch of (word, count) pairs into {word: partial_sum}
    """
    partial = defaultdict(int)
    for word, count in pairs:
        partial[word] += count
    return dict(partial)


def reduce_word(word, contributions):
    """
    Sum every contribution for word, whether unit counts or partial sums
    """
    return word, sum(contributions)


def group_by_word(pairs):
    groups = defaultdict(list)
    for word, count in pairs:
        groups[word].append(count)
    return groups


def reduce_counts(groups):
    """
    Reduce {word: [contributions]} to {word: total}
    """
    return dict(reduce_word(word, contributions)
                for word, contributions in groups.items())


def count_words(lines, cutoff=CUTOFF_DATE):
    """
    Count the words of lines in a single pass, without partitioning.

    Support utility for tests and interactive use; the drivers go
    through map, combine and reduce separately.
    """
    pairs = (pair for line in lines for pair in process_line(line, cutoff))
    return reduce_counts(group_by_word(pairs))
