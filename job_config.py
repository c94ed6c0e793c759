FIELD_SEPARATOR = '\t'
MIN_FIELDS = 4

# a line holding both markers is a header or metadata row
HEADER_MARKERS = ('post_theme', 'date')

DATE_FORMAT_DESCRIPTION = 'dd-MM-yyyy'
CUTOFF_DATE_RAW = '18-10-2019'

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

DEFAULT_SPLIT_LINES = 100000
DEFAULT_REDUCERS = 1

OUTPUT_PART_TEMPLATE = 'part-r-{:05d}'
SUCCESS_MARKER = '_SUCCESS'
