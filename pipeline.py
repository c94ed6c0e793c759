"""Run the word count locally: split, map, combine, shuffle, reduce, write.

This plays the part of the execution substrate for machines without
Hadoop. Each split of the input is a partition processed on its own,
optionally in a pool of worker processes. Final reduction starts only
once every partition has finished.

    count-words-before <in> <out>
"""
import argparse
import logging
import os
import sys
import time
import zlib
from collections import deque
from concurrent.futures import ProcessPoolExecutor
from itertools import islice

from job_config import CUTOFF_DATE_RAW
from job_config import DEFAULT_REDUCERS
from job_config import DEFAULT_SPLIT_LINES
from job_config import OUTPUT_PART_TEMPLATE
from job_config import SUCCESS_MARKER
from post_records import CUTOFF_DATE
from post_records import CountWordsError
from post_records import MalformedRecordError
from post_records import parse_date
from word_counts import combine_pairs
from word_counts import group_by_word
from word_counts import process_line
from word_counts import reduce_counts
from word_counts import set_up_logging

LOG = logging.getLogger('CountWords')


class OutputExistsError(CountWordsError):
    """The output directory is already there"""


def list_input_files(input_path):
    """
    Return the files to read for input_path, which may be a file or a
    directory. Names starting with _ or . are skipped.
    """
    if os.path.isdir(input_path):
        return sorted(os.path.join(input_path, name)
                      for name in os.listdir(input_path)
                      if not name.startswith(('_', '.'))
                      and os.path.isfile(os.path.join(input_path, name)))
    if not os.path.exists(input_path):
        raise FileNotFoundError('Input path does not exist: %s' % input_path)
    return [input_path]


def read_lines(path):
    """
    Yield the lines of path without their terminator. Lines end at \\n
    only, as in mrjob and Hadoop streaming; a trailing \\r is dropped.
    """
    with open(path, 'r', encoding='utf-8', errors='replace', newline='\n') as f:
        for line in f:
            yield line.rstrip('\r\n')


def iter_splits(paths, split_lines=DEFAULT_SPLIT_LINES):
    """
    Yield lists of at most split_lines lines. A split never spans two files.
    """
    for path in paths:
        lines = read_lines(path)
        while True:
            split = list(islice(lines, split_lines))
            if not split:
                break
            yield split


def map_partition(lines, cutoff=CUTOFF_DATE, use_combiner=True):
    """
    Map one partition to its (word, count) pairs, combined if asked
    """
    pairs = [pair for line in lines for pair in process_line(line, cutoff)]
    if not use_combiner:
        return pairs
    return list(combine_pairs(pairs).items())


def reducer_for(word, num_reducers):
    return zlib.crc32(word.encode('utf-8')) % num_reducers


def shuffle(partition_outputs, num_reducers=DEFAULT_REDUCERS):
    """
    Route every pair to its reducer and group it by word.

    Returns a list with one {word: [counts]} mapping per reducer.
    """
    buckets = [[] for _ in range(num_reducers)]
    for pairs in partition_outputs:
        for word, count in pairs:
            buckets[reducer_for(word, num_reducers)].append((word, count))
    return [group_by_word(bucket) for bucket in buckets]


def run_partitions(splits, cutoff=CUTOFF_DATE, use_combiner=True, workers=1):
    """
    Map every split. Returns the pair lists in split order once all are done.

    With several workers at most 2 * workers splits are read ahead of the
    oldest unfinished one.
    """
    if workers <= 1:
        return [map_partition(split, cutoff, use_combiner) for split in splits]

    outputs = []
    pending = deque()
    with ProcessPoolExecutor(max_workers=workers) as executor:
        for split in splits:
            pending.append(executor.submit(map_partition, split, cutoff,
                                           use_combiner))
            if len(pending) >= 2 * workers:
                outputs.append(pending.popleft().result())
        while pending:
            outputs.append(pending.popleft().result())
    return outputs


def count_words_local(paths, cutoff=CUTOFF_DATE, use_combiner=True, workers=1,
                      split_lines=DEFAULT_SPLIT_LINES,
                      num_reducers=DEFAULT_REDUCERS):
    """
    Count words across paths. Returns one {word: total} mapping per reducer.
    """
    outputs = run_partitions(iter_splits(paths, split_lines), cutoff,
                             use_combiner, workers)
    LOG.info('Mapped %d partitions into %d pairs', len(outputs),
             sum(len(pairs) for pairs in outputs))
    return [reduce_counts(groups) for groups in shuffle(outputs, num_reducers)]


def write_output(output_dir, reducer_outputs):
    """
    Write one part file per reducer, words sorted, then the _SUCCESS marker
    """
    os.makedirs(output_dir)
    for index, counts in enumerate(reducer_outputs):
        part_path = os.path.join(output_dir, OUTPUT_PART_TEMPLATE.format(index))
        with open(part_path, 'w', encoding='utf-8', newline='\n') as f:
            for word in sorted(counts):
                f.write('%s\t%d\n' % (word, counts[word]))
        LOG.debug('Wrote %d words to %s', len(counts), part_path)
    open(os.path.join(output_dir, SUCCESS_MARKER), 'w').close()


def read_output(output_dir):
    """
    Load the {word: count} mapping written by write_output.

    Support utility for tests and for checking a finished run.
    """
    counts = {}
    for name in sorted(os.listdir(output_dir)):
        if name.startswith(('_', '.')):
            continue
        for line in read_lines(os.path.join(output_dir, name)):
            word, count = line.rsplit('\t', 1)
            counts[word] = int(count)
    return counts


def run(input_path, output_path, cutoff=CUTOFF_DATE, use_combiner=True,
        workers=1, split_lines=DEFAULT_SPLIT_LINES,
        num_reducers=DEFAULT_REDUCERS):
    if os.path.exists(output_path):
        raise OutputExistsError('Output directory already exists: %s'
                                % output_path)
    paths = list_input_files(input_path)
    LOG.info('Counting words before %s in %d input files',
             cutoff.strftime('%d-%m-%Y'), len(paths))

    start_time = time.time()
    reducer_outputs = count_words_local(paths, cutoff, use_combiner, workers,
                                        split_lines, num_reducers)
    write_output(output_path, reducer_outputs)
    LOG.info('Wrote %d words to %s in %.2fs',
             sum(len(counts) for counts in reducer_outputs), output_path,
             time.time() - start_time)
    return reducer_outputs


def cutoff_arg(value):
    try:
        return parse_date(value)
    except MalformedRecordError as e:
        raise argparse.ArgumentTypeError(e.reason)


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError('must be at least 1: %s' % value)
    return number


def make_parser():
    parser = argparse.ArgumentParser(
        prog='count-words-before',
        description='Count words of posts and comments dated before a cutoff')
    parser.add_argument('input', help='input file or directory')
    parser.add_argument('output', help='output directory, must not exist')
    parser.add_argument('--cutoff', type=cutoff_arg,
                        default=parse_date(CUTOFF_DATE_RAW),
                        help='count records dated before this dd-MM-yyyy '
                             'date (default: %s)' % CUTOFF_DATE_RAW)
    parser.add_argument('--workers', type=positive_int, default=1,
                        help='number of worker processes')
    parser.add_argument('--split-lines', type=positive_int,
                        default=DEFAULT_SPLIT_LINES,
                        help='lines per partition')
    parser.add_argument('--reducers', type=positive_int,
                        default=DEFAULT_REDUCERS,
                        help='number of output part files')
    parser.add_argument('--no-combiner', dest='use_combiner',
                        action='store_false',
                        help='skip the per-partition combine step')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)
    set_up_logging(debug=args.verbose)
    try:
        run(args.input, args.output, cutoff=args.cutoff,
            use_combiner=args.use_combiner, workers=args.workers,
            split_lines=args.split_lines, num_reducers=args.reducers)
    except (OSError, CountWordsError) as e:
        LOG.error('Job failed: %s', e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
