"""Split free text into lowercase word tokens.

A token is a maximal run of Unicode letters, ASCII digits and ``+``.
Every other character separates tokens.

Tokens are lowercased after splitting, so a few letters lowercase to
something that is not a letter: ``'İ'`` becomes ``'i'`` followed by the
combining dot U+0307. ``tokenize('İstanbul')`` is ``['i̇stanbul']``, a
token holding a separator, and tokenizing it again gives ``['i', 'stanbul']``.
"""
from itertools import groupby

TOKEN_EXTRA_CHARS = frozenset('0123456789+')


def is_token_char(char):
    return char.isalpha() or char in TOKEN_EXTRA_CHARS


def tokenize(text):
    """
    Return the lowercase tokens of text, in order. Splitting happens
    before lowercasing.
    """
    return [''.join(run).lower()
            for in_token, run in groupby(text, key=is_token_char)
            if in_token]
