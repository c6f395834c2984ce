import copy
import pickle

import pytest

from yt_engagement.preprocessors.missing import MISSING, is_missing, to_missing, to_null
from yt_engagement.preprocessors.scalar_coerce import ScalarColumnCoercer, render_scalar
from yt_engagement.utils.exceptions import ShapeMismatch


def test_missing_is_singleton_and_falsy():
    assert not MISSING
    assert repr(MISSING) == '<missing>'
    assert copy.deepcopy(MISSING) is MISSING
    assert pickle.loads(pickle.dumps(MISSING)) is MISSING
    assert is_missing(None) and is_missing(MISSING) and not is_missing('')
    assert to_missing(None) is MISSING
    assert to_null(MISSING) is None and to_null(0) == 0


def test_render_scalar_uses_json_booleans():
    assert render_scalar(True) == 'true'
    assert render_scalar(False) == 'false'
    assert render_scalar(12) == '12'


def test_joined_column():
    coercer = ScalarColumnCoercer(separator='|')
    out = coercer.coerce([['a', 'b'], 'c', None, [1, True]], 'tags')
    assert out == {'tags': ['a|b', 'c', MISSING, '1|true']}


def test_empty_list_gives_missing_not_dropped_row():
    out = ScalarColumnCoercer().coerce([[], ['x']], 'tags')
    assert out['tags'] == [MISSING, 'x']


def test_explode_transposes_by_position():
    out = ScalarColumnCoercer().coerce(
        [['cnn', 'sports'], [], 'solo'], 'snippet.tags', explode=True, stem='tag'
    )
    assert list(out) == ['tag_1', 'tag_2']
    assert out['tag_1'] == ['cnn', MISSING, 'solo']
    assert out['tag_2'] == ['sports', MISSING, MISSING]


def test_explode_all_empty_yields_no_columns():
    assert ScalarColumnCoercer().coerce([[], None], 'tags', explode=True) == {}


@pytest.mark.parametrize('cell', [{'a': 1}, [{'a': 1}], [['nested']]])
def test_nested_cells_rejected(cell):
    with pytest.raises(ShapeMismatch):
        ScalarColumnCoercer().coerce([cell], 'tags')
