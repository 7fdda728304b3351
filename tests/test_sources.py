# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for loading and reloading PathTree documents from sources."""

import io
import json

import pytest

from genro_pathtree import (
    FileNameSource,
    FileSource,
    NotAnObjectError,
    PathTree,
    SourceUnavailableError,
    StreamSource,
    UnsupportedError,
)
from genro_pathtree.sources import source_for

PRODUCT_SET = {
    'title': 'Product set',
    'type': 'array',
    'date': 10247893,
    'items': {'title': 'Product', 'type': 'object'},
}


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestSourceFor:
    """Tests for source descriptor selection."""

    def test_path(self, tmp_path):
        """Test path objects give a FileSource."""
        source = source_for(tmp_path / 'a.json')
        assert isinstance(source, FileSource)
        assert source.kind == 'file'

    def test_file_name(self):
        """Test strings give a FileNameSource."""
        source = source_for('a.json')
        assert isinstance(source, FileNameSource)
        assert source.kind == 'file_name'

    def test_empty_file_name(self):
        """Test an empty file name is refused."""
        with pytest.raises(ValueError):
            source_for('')

    def test_stream(self):
        """Test readable objects give a StreamSource."""
        source = source_for(io.StringIO('{}'))
        assert isinstance(source, StreamSource)
        assert source.kind == 'stream'

    def test_other(self):
        """Test other objects have no source."""
        assert source_for({'a': 1}) is None
        assert source_for(3) is None


class TestFileSource:
    """Tests for file-backed trees."""

    def test_load_path(self, tmp_path):
        """Test loading from a path object."""
        path = write_json(tmp_path / 'config.json', PRODUCT_SET)
        tree = PathTree(path)
        assert tree.get_string('items.title') == 'Product'
        assert tree.source == FileSource(path)

    def test_load_file_name(self, tmp_path):
        """Test loading from a file name string."""
        path = write_json(tmp_path / 'config.json', PRODUCT_SET)
        tree = PathTree(str(path))
        assert tree.get_integer('date') == 10247893
        assert isinstance(tree.source, FileNameSource)

    def test_from_file(self, tmp_path):
        """Test the from_file shortcut."""
        path = write_json(tmp_path / 'config.json', PRODUCT_SET)
        tree = PathTree.from_file(str(path), separator='/')
        assert tree.get_string('items/type') == 'object'

    def test_missing_file(self, tmp_path):
        """Test a missing file raises SourceUnavailableError."""
        with pytest.raises(SourceUnavailableError) as info:
            PathTree(tmp_path / 'missing.json')
        assert info.value.kind == 'SourceUnavailable'
        assert isinstance(info.value.__cause__, OSError)

    def test_empty_file(self, tmp_path):
        """Test an empty file is refused."""
        path = tmp_path / 'empty.json'
        path.write_text('', encoding='utf-8')
        with pytest.raises(SourceUnavailableError, match='empty'):
            PathTree(path)

    def test_not_an_object(self, tmp_path):
        """Test a file holding an array is refused."""
        path = write_json(tmp_path / 'list.json', [1, 2])
        with pytest.raises(NotAnObjectError):
            PathTree(path)

    def test_reload_file(self, tmp_path):
        """Test reload picks up changes to the file."""
        path = write_json(tmp_path / 'testfile.json', PRODUCT_SET)
        tree = PathTree(path)
        assert tree.get_string('title') == 'Product set'
        write_json(path, {**PRODUCT_SET, 'title': 'Product jet'})
        tree.reload()
        assert tree.get_string('title') == 'Product jet'

    def test_reload_discards_local_changes(self, tmp_path):
        """Test reload replaces the whole document."""
        path = write_json(tmp_path / 'config.json', PRODUCT_SET)
        tree = PathTree(str(path))
        tree.set('added.key', 1)
        tree.reload()
        assert tree.get_element('added') is None

    def test_reload_missing_file(self, tmp_path):
        """Test reload fails and keeps the document when the file is gone."""
        path = write_json(tmp_path / 'config.json', PRODUCT_SET)
        tree = PathTree(path)
        path.unlink()
        with pytest.raises(SourceUnavailableError):
            tree.reload()
        assert tree.get_string('title') == 'Product set'

    def test_reload_invalid_json(self, tmp_path):
        """Test reload fails on corrupted content."""
        path = write_json(tmp_path / 'config.json', PRODUCT_SET)
        tree = PathTree(path)
        path.write_text('{"title": ', encoding='utf-8')
        with pytest.raises(SourceUnavailableError):
            tree.reload()
        assert tree.get_string('title') == 'Product set'


class TestStreamSource:
    """Tests for stream-backed trees."""

    def test_load_text_stream(self):
        """Test loading from a text stream."""
        tree = PathTree(io.StringIO(json.dumps(PRODUCT_SET)))
        assert tree.get_string('items.title') == 'Product'

    def test_load_binary_stream(self):
        """Test loading from a binary stream."""
        tree = PathTree.from_stream(io.BytesIO(json.dumps(PRODUCT_SET).encode('utf-8')))
        assert tree.get_string('type') == 'array'

    def test_reload_seekable_stream(self):
        """Test reload rewinds a seekable stream."""
        stream = io.StringIO(json.dumps(PRODUCT_SET))
        tree = PathTree(stream)
        tree.set('title', 'local')
        tree.reload()
        assert tree.get_string('title') == 'Product set'

    def test_reload_closed_stream(self):
        """Test reload of a closed stream is unavailable."""
        stream = io.StringIO(json.dumps(PRODUCT_SET))
        tree = PathTree(stream)
        stream.close()
        with pytest.raises(SourceUnavailableError):
            tree.reload()
        assert tree.get_string('title') == 'Product set'

    def test_reload_consumed_stream(self):
        """Test a non-seekable stream cannot be read twice."""

        class OneShot:
            def __init__(self, text):
                self._text = text

            def read(self):
                text, self._text = self._text, ''
                return text

        tree = PathTree(OneShot(json.dumps(PRODUCT_SET)))
        with pytest.raises(SourceUnavailableError, match='empty'):
            tree.reload()


class TestNoSource:
    """Tests for trees without a backing source."""

    def test_reload_dict_tree(self):
        """Test a tree built from a dict cannot reload."""
        with pytest.raises(UnsupportedError) as info:
            PathTree({'a': 1}).reload()
        assert info.value.kind == 'Unsupported'

    def test_reload_empty_tree(self):
        """Test an empty tree cannot reload."""
        with pytest.raises(UnsupportedError):
            PathTree().reload()
