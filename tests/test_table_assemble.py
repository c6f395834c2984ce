import polars as pl
import pytest
from polars.testing import assert_frame_equal

from yt_engagement.preprocessors.flatten import RecordFlattener
from yt_engagement.preprocessors.missing import MISSING
from yt_engagement.preprocessors.table_assemble import TableAssembler
from yt_engagement.utils.exceptions import MissingIdentifierError


@pytest.fixture
def assembler():
    flattener = RecordFlattener(explode_fields={'snippet.tags': 'snippet.tag'})
    return TableAssembler(flattener=flattener)


def test_tags_scenario_gives_full_column_set(assembler, video):
    records = [video('A', tags=['cnn', 'sports']), video('B', tags=[])]
    table = assembler.assemble(records).table

    assert table['tag_1'].to_list() == ['cnn', None]
    assert table['tag_2'].to_list() == ['sports', None]


def test_pivot_alignment_across_records(assembler):
    records = [
        {'id': 'A', 'variants': [{'lang': 'en', 'title': 'a'}]},
        {'id': 'B', 'variants': [{'lang': 'fr', 'title': 'b1'}, {'lang': 'de'}, {'lang': 'ko', 'title': 'b3'}]},
    ]
    table = assembler.assemble(records).table
    a = table.filter(pl.col('id') == 'A').row(0, named=True)

    assert a['variants.lang_1'] == 'en'
    assert a['variants.title_1'] == 'a'
    for pos in (2, 3):
        assert a[f'variants.lang_{pos}'] is None
        assert a[f'variants.title_{pos}'] is None


def test_dedup_keeps_max_views(assembler, video):
    records = [video('V1', views='100'), video('V1', views='500')]
    result = assembler.assemble(records)

    assert result.table.height == 1
    assert result.table['viewCount'].to_list() == [500]
    assert result.report.duplicates_removed == 1


def test_dedup_tie_keeps_first_and_input_order(assembler, video):
    records = [
        video('V2', views='10'),
        video('V1', views='100', title='first'),
        video('V1', views='100', title='second'),
        video('V3', views='1'),
    ]
    table = assembler.assemble(records).table

    assert table['id'].to_list() == ['V2', 'V1', 'V3']
    assert table.filter(pl.col('id') == 'V1')['title'].item() == 'first'


def test_row_count_and_failed_records_reported(assembler, video):
    bad = video('BAD')
    bad['statistics'] = 'not-a-mapping'
    mixed = video('MIX', variants=[{'a': 1}, 'b'])
    records = [video('V1'), bad, video('V2'), mixed, video('V3')]

    result = assembler.assemble(records)
    report = result.report

    assert report.input_records == 5
    assert report.flattened_rows == 3
    assert report.failed_records == 2
    assert [f.kind for f in report.failures] == ['SchemaMismatch', 'ShapeMismatch']
    assert report.summary()['failed_identifiers'] == ['BAD', 'MIX']
    assert result.table.height == 3


def test_absent_columns_filled_with_null(assembler, video):
    records = [video('V1', defaultLanguage='en'), video('V2')]
    table = assembler.assemble(records).table

    assert table['defaultLanguage'].to_list() == ['en', None]


def test_union_fills_missing_marker(assembler):
    rows = assembler.union([{'id': 'A', 'x': 1}, {'id': 'B', 'y': 2}])
    assert rows == [
        {'id': 'A', 'x': 1, 'y': MISSING},
        {'id': 'B', 'x': MISSING, 'y': 2},
    ]


def test_empty_object_list_does_not_shadow_pivot(assembler):
    records = [{'id': 'A', 'links': []}, {'id': 'B', 'links': [{'url': 'u'}]}]
    table = assembler.assemble(records).table

    assert 'links' not in table.columns
    assert table['links.url_1'].to_list() == [None, 'u']


def test_prefixes_stripped(assembler, video):
    table = assembler.assemble([video('V1')]).table

    for column in ('title', 'viewCount', 'publishedAt', 'duration', 'localized.title', 'thumbnails.default.url'):
        assert column in table.columns
    assert not [c for c in table.columns if c.startswith(('snippet.', 'statistics.'))]


def test_rename_collision_keeps_dotted_names(assembler):
    records = [{'id': 'A', 'snippet': {'x': 1}, 'status': {'x': 2}}]
    table = assembler.assemble(records).table

    assert 'snippet.x' in table.columns
    assert 'status.x' in table.columns
    assert 'x' not in table.columns


def test_numeric_columns_and_coercion_errors(assembler, video):
    records = [video('V1', views='1,000'), video('V2', views='42')]
    result = assembler.assemble(records)
    table = result.table

    assert table.schema['viewCount'] == pl.Int64
    assert table.schema['thumbnails.default.width'] == pl.Int64
    assert table.filter(pl.col('id') == 'V1')['viewCount'].item() is None
    assert table.filter(pl.col('id') == 'V2')['viewCount'].item() == 42

    errors = result.report.coercion_errors
    assert len(errors) == 1
    assert errors[0].column == 'viewCount'
    assert errors[0].identifier == 'V1'
    assert errors[0].value == '1,000'


def test_published_timestamp_derived(assembler, video):
    records = [video('V1', published='2021-03-04T05:06:07Z'), video('V2', published='last tuesday')]
    result = assembler.assemble(records)
    table = result.table

    assert table.schema['published_at'] == pl.Datetime('us', 'UTC')
    published = table['published_at'].to_list()
    assert published[0].year == 2021 and published[0].hour == 5
    assert published[1] is None
    assert len(result.report.timestamp_errors) == 1


def test_missing_identifier_aborts(assembler, video):
    anonymous = video('X')
    del anonymous['id']
    with pytest.raises(MissingIdentifierError):
        assembler.assemble([video('V1'), anonymous])


def test_identifier_column_absent_aborts(assembler):
    with pytest.raises(MissingIdentifierError):
        assembler.assemble([{'name': 'no id here'}])


def test_empty_input_gives_empty_table(assembler):
    result = assembler.assemble([])
    assert result.table.height == 0
    assert result.report.output_rows == 0


def test_parallel_flatten_matches_sequential(videos):
    flattener = RecordFlattener(explode_fields={'snippet.tags': 'snippet.tag'})
    sequential = TableAssembler(flattener=flattener).assemble(videos).table
    parallel = TableAssembler(flattener=flattener, max_workers=2).assemble(videos).table

    assert_frame_equal(sequential, parallel)


def test_oversized_count_does_not_abort_assembly(assembler, video):
    records = [video('V1', views='99999999999999999999'), video('V2', views='5')]
    result = assembler.assemble(records)

    assert result.table['viewCount'].to_list() == [None, 5]
    assert [e.identifier for e in result.report.coercion_errors] == ['V1']


def test_null_tags_same_columns_as_empty_tags(assembler, video):
    untagged = video('B')
    untagged['snippet']['tags'] = None
    with_null = assembler.assemble([video('A', tags=['cnn']), untagged]).table
    with_empty = assembler.assemble([video('A', tags=['cnn']), video('B', tags=[])]).table

    assert 'tags' not in with_null.columns
    assert with_null.columns == with_empty.columns
    assert with_null['tag_1'].to_list() == ['cnn', None]
