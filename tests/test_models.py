"""Tests for the models module."""

import re

import pytest

from dotai.models import (
    CatalogItem,
    InstalledItem,
    InstallResult,
    InstallSummary,
    LockFile,
    Preferences,
    ValidationIssue,
    ValidationResult,
    item_key,
    utc_timestamp,
)


class TestHelpers:
    """Tests for module-level helpers."""

    def test_item_key(self):
        """Keys are type/id."""
        assert item_key('rules', 'no-secrets') == 'rules/no-secrets'

    def test_utc_timestamp(self):
        """Timestamps are ISO-8601 UTC with milliseconds and a Z suffix."""
        assert re.fullmatch(r'\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z', utc_timestamp())


class TestCatalogItem:
    """Tests for CatalogItem."""

    def test_to_dict_omits_content_by_default(self):
        """Content is only included on request."""
        item = CatalogItem(
            id='x', name='x', type='skills', path='skills/x', content='body'
        )
        assert 'content' not in item.to_dict()
        assert item.to_dict(include_content=True)['content'] == 'body'

    def test_to_dict_optional_fields(self):
        """Category and tags are emitted only when set."""
        item = CatalogItem(id='x', name='X', type='rules', path='rules/x', tags=[])
        data = item.to_dict()
        assert 'category' not in data
        assert data['tags'] == []


class TestInstalledItem:
    """Tests for InstalledItem."""

    def test_from_dict(self):
        """Parse a lock file entry."""
        entry = InstalledItem.from_dict({
            'type': 'skills',
            'id': 'alpha',
            'source': 'builtin',
            'hash': 'h',
            'installedAt': '2026-01-01T00:00:00.000Z',
            'assistants': ['claude'],
            'scope': 'global',
            'method': 'symlink',
        })
        assert entry.key == 'skills/alpha'
        assert entry.installed_at == '2026-01-01T00:00:00.000Z'
        assert entry.scope == 'global'
        assert entry.method == 'symlink'

    def test_from_dict_defaults(self):
        """Optional fields fall back to defaults."""
        entry = InstalledItem.from_dict({'type': 'rules', 'id': 'x', 'assistants': ['a']})
        assert entry.source == 'builtin'
        assert entry.scope == 'project'
        assert entry.method == 'copy'

    @pytest.mark.parametrize('data', [
        {'type': 'widgets', 'id': 'x'},
        {'type': 'skills', 'id': 'x', 'assistants': 'claude'},
        {'type': 'skills', 'id': 'x', 'scope': 'team'},
        {'type': 'skills', 'id': 'x', 'method': 'hardlink'},
        ['not', 'an', 'object'],
    ])
    def test_from_dict_rejects_bad_shapes(self, data):
        """Malformed entries raise ValueError."""
        with pytest.raises(ValueError):
            InstalledItem.from_dict(data)


class TestPreferences:
    """Tests for Preferences."""

    def test_is_empty(self):
        """No fields set means empty."""
        assert Preferences().is_empty()
        assert not Preferences(default_method='copy').is_empty()

    def test_merged(self):
        """Set fields in the other preferences win."""
        base = Preferences(default_assistants=['claude'], default_scope='global')
        merged = base.merged(Preferences(default_scope='project', default_method='symlink'))
        assert merged == Preferences(
            default_assistants=['claude'],
            default_scope='project',
            default_method='symlink',
        )

    def test_round_trip_keys(self):
        """Serialized preferences use camelCase keys."""
        prefs = Preferences(default_assistants=['cursor'])
        assert prefs.to_dict() == {'defaultAssistants': ['cursor']}
        assert Preferences.from_dict(prefs.to_dict()) == prefs

    def test_from_dict_rejects_string_assistants(self):
        """A bare string is not a list of assistants."""
        with pytest.raises(ValueError, match='defaultAssistants'):
            Preferences.from_dict({'defaultAssistants': 'claude'})

    def test_from_dict_rejects_unknown_scope_and_method(self):
        """Scope and method must be known values."""
        with pytest.raises(ValueError, match='scope'):
            Preferences.from_dict({'defaultScope': 'workspace'})
        with pytest.raises(ValueError, match='method'):
            Preferences.from_dict({'defaultMethod': 'hardlink'})


class TestLockFile:
    """Tests for LockFile."""

    def test_empty_document(self):
        """An empty document has only version and installed."""
        assert LockFile().to_dict() == {'version': '1.0.0', 'installed': {}}

    def test_from_dict_rejects_non_object(self):
        """The root must be an object."""
        with pytest.raises(ValueError):
            LockFile.from_dict([])
        with pytest.raises(ValueError):
            LockFile.from_dict({'installed': []})


class TestResults:
    """Tests for validation and install results."""

    def test_validation_result_partitions(self):
        """Errors and warnings are split by severity."""
        result = ValidationResult(
            valid=False,
            issues=[
                ValidationIssue('name', 'error', 'bad'),
                ValidationIssue('tags', 'warning', 'missing'),
            ],
        )
        assert [i.field for i in result.errors] == ['name']
        assert [i.field for i in result.warnings] == ['tags']

    def test_install_summary_counts(self):
        """Summaries count successes and failures."""
        item = CatalogItem(id='x', name='x', type='skills', path='skills/x')
        summary = InstallSummary(results=[
            InstallResult(success=True, item=item, assistant=None, path='/a'),
            InstallResult(success=False, item=item, assistant=None, path='', error='boom'),
        ])
        assert summary.total == 2
        assert summary.successful == 1
        assert summary.failed == 1
