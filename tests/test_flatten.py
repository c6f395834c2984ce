import pytest

from yt_engagement.preprocessors.flatten import OBJECT_LIST, SCALAR_LIST, RecordFlattener, classify_list
from yt_engagement.preprocessors.missing import MISSING
from yt_engagement.utils.exceptions import SchemaMismatch, ShapeMismatch
from yt_engagement.utils.flattener_helper import flatten_mapping


def test_flat_record_is_returned_unchanged():
    record = {'id': 'V1', 'title': 'hello', 'views': 3, 'live': False}
    assert RecordFlattener().flatten(record) == record


def test_nested_mappings_use_dotted_paths():
    row = RecordFlattener(aligned_field=None).flatten({'id': 'V1', 'a': {'b': {'c': 1}, 'd': 'x'}})
    assert row == {'id': 'V1', 'a.b.c': 1, 'a.d': 'x'}


def test_flatten_mapping_duplicate_path_rejected():
    with pytest.raises(SchemaMismatch):
        flatten_mapping({'a.b': 1, 'a': {'b': 2}})


def test_statistics_aligned_to_expected_keys():
    record = {'id': 'V1', 'statistics': {'viewCount': '10', 'extraCount': '7'}}
    row = RecordFlattener().flatten(record)

    assert row['statistics.viewCount'] == '10'
    assert row['statistics.likeCount'] is MISSING
    assert row['statistics.dislikeCount'] is MISSING
    assert row['statistics.favoriteCount'] is MISSING
    assert row['statistics.commentCount'] is MISSING
    # 모르는 키는 그대로 통과
    assert row['statistics.extraCount'] == '7'


def test_alignment_does_not_mutate_input():
    stats = {'viewCount': '10'}
    record = {'id': 'V1', 'statistics': stats}
    RecordFlattener().flatten(record)
    assert stats == {'viewCount': '10'}


def test_null_statistics_aligned_as_empty():
    row = RecordFlattener(expected_keys=['viewCount']).flatten({'id': 'V1', 'statistics': None})
    assert row == {'id': 'V1', 'statistics.viewCount': MISSING}


def test_scalar_statistics_is_schema_mismatch():
    with pytest.raises(SchemaMismatch):
        RecordFlattener().flatten({'id': 'V1', 'statistics': '42'})


def test_non_mapping_record_is_schema_mismatch():
    with pytest.raises(SchemaMismatch):
        RecordFlattener().flatten(['not', 'a', 'record'])


def test_scalar_list_joined_by_default():
    row = RecordFlattener(list_separator='; ').flatten({'id': 'V1', 'topics': ['music', 'pop']})
    assert row == {'id': 'V1', 'topics': 'music; pop'}


def test_explode_fields_use_configured_stem():
    flattener = RecordFlattener(explode_fields={'snippet.tags': 'snippet.tag'})
    row = flattener.flatten({'id': 'V1', 'snippet': {'tags': ['cnn', 'sports'], 'title': 't'}})
    assert row == {'id': 'V1', 'snippet.tag_1': 'cnn', 'snippet.tag_2': 'sports', 'snippet.title': 't'}


def test_list_of_objects_pivoted_in_place():
    record = {
        'id': 'V1',
        'variants': [{'lang': 'en', 'title': 'Hi'}, {'lang': 'ko'}],
        'after': 1,
    }
    row = RecordFlattener().flatten(record)
    assert list(row) == [
        'id',
        'variants.lang_1', 'variants.title_1',
        'variants.lang_2', 'variants.title_2',
        'after',
    ]
    assert row['variants.title_2'] is MISSING
    assert 'variants' not in row


def test_mixed_list_is_shape_mismatch():
    with pytest.raises(ShapeMismatch):
        RecordFlattener().flatten({'id': 'V1', 'variants': [{'lang': 'en'}, 'ko']})


def test_generated_name_collision_is_shape_mismatch():
    record = {'id': 'V1', 'x.k_1': 'scalar', 'x': [{'k': 'pivoted'}]}
    with pytest.raises(ShapeMismatch):
        RecordFlattener().flatten(record)


def test_classify_list():
    assert classify_list([], 'x') == SCALAR_LIST
    assert classify_list([1, 'a'], 'x') == SCALAR_LIST
    assert classify_list([{'a': 1}], 'x') == OBJECT_LIST
    with pytest.raises(ShapeMismatch):
        classify_list([{'a': 1}, 2], 'x')


def test_null_exploded_list_adds_no_columns():
    flattener = RecordFlattener(explode_fields={'snippet.tags': 'snippet.tag'})
    row = flattener.flatten({'id': 'V1', 'snippet': {'tags': None, 'title': 't'}})
    assert row == {'id': 'V1', 'snippet.title': 't'}


def test_mapping_in_expected_statistics_key_is_schema_mismatch():
    with pytest.raises(SchemaMismatch):
        RecordFlattener().flatten({'id': 'V1', 'statistics': {'viewCount': {'value': '10'}}})
