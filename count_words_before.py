"""Count the words of posts and comments dated before a cutoff, with mrjob.

    python count_words_before.py posts.tsv -o counts/ [-r hadoop] [--cutoff 18-10-2019]
"""
import logging

from mrjob.job import MRJob
from mrjob.step import MRStep

from job_config import CUTOFF_DATE_RAW
from post_records import MalformedRecordError
from post_records import is_before_cutoff
from post_records import parse_date
from post_records import parse_line
from word_counts import combine
from word_counts import emit_words
from word_counts import reduce_word
from word_counts import set_up_logging

LOG = logging.getLogger('CountWords')
set_up_logging()

COUNTER_GROUP = 'CountWordsBefore'


class MRCountWordsBefore(MRJob):
    """
    Word frequencies of records dated strictly before --cutoff
    """
    def configure_args(self):
        super(MRCountWordsBefore, self).configure_args()
        self.add_passthru_arg(
            '--cutoff', default=CUTOFF_DATE_RAW,
            help='Only count records dated before this dd-MM-yyyy date')

    def steps(self):
        return [MRStep(mapper_init=self.mapper_init,
                       mapper=self.mapper,
                       combiner=self.combiner,
                       reducer=self.reducer)]

    def mapper_init(self):
        self.cutoff = parse_date(self.options.cutoff)

    def mapper(self, _, line):
        try:
            record = parse_line(line.rstrip('\r'))
        except MalformedRecordError as e:
            LOG.info('Skipping malformed record: %s', e.reason)
            self.increment_counter(COUNTER_GROUP, 'malformed records', 1)
            return
        if record is None:
            self.increment_counter(COUNTER_GROUP, 'header lines', 1)
            return
        if not is_before_cutoff(record, self.cutoff):
            self.increment_counter(COUNTER_GROUP, 'records after cutoff', 1)
            return

        self.increment_counter(COUNTER_GROUP, 'records counted', 1)
        for word, one in emit_words(record):
            yield word, one

    def combiner(self, word, counts):
        """
        Sums up count for each mapper
        """
        yield combine(word, counts)

    def reducer(self, word, counts):
        yield reduce_word(word, counts)


if __name__ == '__main__':
    MRCountWordsBefore.run()
