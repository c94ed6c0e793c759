"""
Pytest configuration and shared fixtures
"""

import os
import shutil
import tempfile

import pytest


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def sample_lines():
    """The four example records: counted, reply, after cutoff, header"""
    return [
        'Hello World\tx\t01-01-2019\tfoo bar',
        'Ignored Title\t\t01-01-2019\treply text',
        'Late Post\tx\t01-01-2020\tfoo',
        'post_theme header date line\tx\t01-01-2019\tfoo',
    ]


@pytest.fixture
def expected_counts():
    return {'hello': 1, 'world': 1, 'foo': 1, 'bar': 1, 'reply': 1, 'text': 1}


@pytest.fixture
def forum_lines():
    """A larger mix of posts, replies, junk and malformed lines"""
    return [
        'post_theme\tis_post\tdate\tcomment',
        'C++ tips\tx\t17-10-2019\tUse C++ and café, not Java!',
        'Ignored\t\t16-10-2019\tI agree: C++ is great',
        'Boundary\tx\t18-10-2019\tnot counted',
        'After\tx\t19-10-2019\tnot counted either',
        'too\tfew',
        'Bad date\tx\t2019-10-01\tnot counted',
        'Short date\tx\t1-1-2019\tnot counted',
        'Old post\tx\t31-12-1999\tgreat tips, great CAFÉ',
        'Extra\tx\t01-02-2019\tfields\tare ignored',
    ]


@pytest.fixture
def forum_input_file(temp_dir, forum_lines):
    filepath = os.path.join(temp_dir, 'posts.tsv')
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write('\n'.join(forum_lines) + '\n')
    return filepath


@pytest.fixture
def forum_counts():
    """Word counts expected from forum_lines"""
    return {
        'use': 1, 'c++': 3, 'and': 1, 'café': 2, 'not': 1, 'java': 1,
        'tips': 2, 'i': 1, 'agree': 1, 'is': 1, 'great': 3,
        'old': 1, 'post': 1, 'fields': 1, 'extra': 1,
    }
