"""Tests for the installer module."""

from unittest.mock import patch

import pytest

from dotai.assistants import get_registry
from dotai.exceptions import UninstallError
from dotai.installer import (
    catalog_hash_resolver,
    content_hash,
    install_items,
    is_item_installed,
    uninstall_item,
)
from dotai.lock import get_lock_store
from dotai.models import CatalogItem


@pytest.fixture
def registry(env):
    return get_registry(env)


@pytest.fixture
def claude(registry):
    return registry.require('claude')


class TestContentHash:
    """Tests for content_hash()"""

    def test_stable(self, templates_root):
        """Hashing the same tree twice gives the same value."""
        path = templates_root / 'skills' / 'alpha'
        assert content_hash(path) == content_hash(path)
        assert len(content_hash(path)) == 16

    def test_detects_edits(self, templates_root):
        """Changing any file changes the hash."""
        path = templates_root / 'skills' / 'alpha'
        before = content_hash(path)
        (path / 'reference.md').write_text('changed\n')
        assert content_hash(path) != before

    def test_detects_renames(self, tmp_path):
        """File names are part of the hash."""
        a = tmp_path / 'a'
        b = tmp_path / 'b'
        a.mkdir()
        b.mkdir()
        (a / 'one.md').write_text('same')
        (b / 'two.md').write_text('same')
        assert content_hash(a) != content_hash(b)


class TestInstallItems:
    """Tests for install_items()"""

    def test_install_project(self, catalog, claude, project, env):
        """Copy the whole item directory into <project>/.ai and record it."""
        item = catalog.resolve('skills/alpha')
        summary = install_items([item], [claude], 'project', 'copy', project, env)

        assert summary.total == 1
        assert summary.successful == 1
        result = summary.results[0]
        dest = project / '.ai' / 'skills' / 'alpha'
        assert result.path == str(dest)
        assert result.assistant is claude
        assert (dest / 'SKILL.md').read_text() == item.content
        assert (dest / 'reference.md').exists()

        info = get_lock_store('project', project).get_install_info('skills', 'alpha')
        assert info.assistants == ['claude']
        assert info.source == 'builtin'
        assert info.hash == content_hash(item.source_dir)
        assert info.scope == 'project'
        assert info.method == 'copy'

    def test_no_assistant_directories(self, catalog, registry, project, env):
        """Only the canonical directory is created."""
        item = catalog.resolve('skills/alpha')
        install_items([item], registry.all(), 'project', 'copy', project, env)
        assert sorted(p.name for p in project.iterdir()) == ['.ai']

    def test_install_global(self, catalog, claude, project, env):
        """Global installs go under the home directory."""
        item = catalog.resolve('rules/shared')
        summary = install_items([item], [claude], 'global', 'symlink', project, env)

        assert summary.failed == 0
        assert (env.home / '.ai' / 'rules' / 'shared' / 'RULE.md').exists()
        assert not (project / '.ai').exists()
        info = get_lock_store('global', env=env).get_install_info('rules', 'shared')
        assert info.scope == 'global'
        assert info.method == 'symlink'

    def test_reinstall_overwrites_and_unions(self, catalog, registry, project, env):
        """Reinstalling refreshes files and adds assistants."""
        item = catalog.resolve('skills/alpha')
        install_items([item], [registry.require('claude')], 'project', 'copy', project, env)

        dest = project / '.ai' / 'skills' / 'alpha' / 'SKILL.md'
        dest.write_text('local edit')
        install_items([item], [registry.require('cursor')], 'project', 'copy', project, env)

        assert dest.read_text() == item.content
        info = get_lock_store('project', project).get_install_info('skills', 'alpha')
        assert info.assistants == ['claude', 'cursor']

    def test_reinstall_same_assistant(self, catalog, claude, project, env):
        """Installing twice for one assistant keeps a single, unduplicated entry."""
        item = catalog.resolve('skills/alpha')
        first = install_items([item], [claude], 'project', 'copy', project, env)
        second = install_items([item], [claude], 'project', 'copy', project, env)

        for summary in (first, second):
            assert summary.successful == 1
            assert summary.failed == 0
        store = get_lock_store('project', project)
        assert [entry.key for entry in store.installed_items()] == ['skills/alpha']
        assert store.get_install_info('skills', 'alpha').assistants == ['claude']

    def test_project_defaults_to_environment_cwd(self, catalog, claude, project, env):
        """Without a project root, items land in the environment's working directory."""
        item = catalog.resolve('skills/alpha')
        summary = install_items([item], [claude], 'project', 'copy', env=env)
        assert summary.successful == 1
        assert (project / '.ai' / 'skills' / 'alpha' / 'SKILL.md').exists()
        assert get_lock_store('project', env=env).is_installed('skills', 'alpha')

    def test_failure_does_not_stop_batch(self, catalog, claude, project, env, tmp_path):
        """A failing item is reported and the rest still install."""
        missing = CatalogItem(
            id='ghost',
            name='ghost',
            type='skills',
            path='skills/ghost',
            source_dir=tmp_path / 'nowhere',
        )
        good = catalog.resolve('commands/deploy')
        summary = install_items([missing, good], [claude], 'project', 'copy', project, env)

        assert [r.success for r in summary.results] == [False, True]
        assert 'source directory not found' in summary.results[0].error
        assert summary.results[0].path == ''
        store = get_lock_store('project', project)
        assert not store.is_installed('skills', 'ghost')
        assert store.is_installed('commands', 'deploy')

    def test_lock_failure_is_reported(self, catalog, claude, project, env):
        """A lock file failure marks the item as failed."""
        from dotai.exceptions import LockFileError

        item = catalog.resolve('skills/alpha')
        with patch('dotai.lock.LockStore.update', side_effect=LockFileError(project, 'disk full')):
            summary = install_items([item], [claude], 'project', 'copy', project, env)

        assert summary.failed == 1
        assert 'disk full' in summary.results[0].error

    def test_empty_batch(self, claude, project, env):
        """Nothing to install yields an empty summary."""
        summary = install_items([], [claude], 'project', 'copy', project, env)
        assert summary.total == 0


class TestUninstall:
    """Tests for uninstall_item() and is_item_installed()"""

    def test_uninstall(self, catalog, claude, project, env):
        """Remove the canonical directory."""
        item = catalog.resolve('skills/alpha')
        install_items([item], [claude], 'project', 'copy', project, env)
        assert is_item_installed(item, claude, 'project', project, env)

        assert uninstall_item(item, claude, 'project', project, env) is True
        assert not is_item_installed(item, claude, 'project', project, env)
        assert not (project / '.ai' / 'skills' / 'alpha').exists()

    def test_uninstall_leaves_lock_file(self, catalog, claude, project, env):
        """Lock bookkeeping is a separate step."""
        item = catalog.resolve('skills/alpha')
        install_items([item], [claude], 'project', 'copy', project, env)
        uninstall_item(item, claude, 'project', project, env)
        assert get_lock_store('project', project).is_installed('skills', 'alpha')

    def test_uninstall_missing(self, catalog, claude, project, env):
        """Removing something absent reports False."""
        item = catalog.resolve('skills/alpha')
        assert uninstall_item(item, claude, 'project', project, env) is False

    def test_uninstall_refuses_paths_outside_type_dir(self, catalog, claude, project, env):
        """Ids that climb out of .ai/<type>/ are refused and nothing is deleted."""
        install_items([catalog.resolve('skills/alpha')], [claude], 'project', 'copy', project, env)
        (project / 'src').mkdir()
        (project / 'src' / 'main.py').write_text('print(1)\n')

        for item_id in ('..', '../..', '', 'alpha/..'):
            item = CatalogItem(id=item_id, name=item_id, type='skills', path=f'skills/{item_id}')
            with pytest.raises(UninstallError):
                uninstall_item(item, claude, 'project', project, env)

        assert (project / 'src' / 'main.py').exists()
        assert (project / '.ai' / 'skills' / 'alpha').is_dir()
        assert (project / '.ai' / '.skill-lock.json').exists()

    def test_installed_check_ignores_assistant(self, catalog, registry, project, env):
        """Content is shared, so every assistant sees it."""
        item = catalog.resolve('skills/alpha')
        install_items([item], [registry.require('claude')], 'project', 'copy', project, env)
        assert is_item_installed(item, registry.require('cursor'), 'project', project, env)


class TestHashResolver:
    """Tests for catalog_hash_resolver()"""

    def test_up_to_date(self, catalog, claude, project, env):
        """Freshly installed items are current."""
        install_items([catalog.resolve('skills/alpha')], [claude], 'project', 'copy', project, env)
        store = get_lock_store('project', project)
        assert store.check_for_updates(catalog_hash_resolver(catalog)) == []

    def test_outdated_after_source_change(self, catalog, claude, project, env, templates_root):
        """Editing the catalog source marks the item outdated."""
        install_items([catalog.resolve('skills/alpha')], [claude], 'project', 'copy', project, env)
        (templates_root / 'skills' / 'alpha' / 'reference.md').write_text('new\n')

        store = get_lock_store('project', project)
        outdated = store.check_for_updates(catalog_hash_resolver(catalog))
        assert [i.key for i in outdated] == ['skills/alpha']

    def test_removed_from_catalog(self, catalog, claude, project, env, templates_root):
        """Items gone from the catalog cannot be checked and are not reported."""
        import shutil

        install_items([catalog.resolve('commands/deploy')], [claude], 'project', 'copy', project, env)
        shutil.rmtree(templates_root / 'commands' / 'deploy')

        store = get_lock_store('project', project)
        assert store.check_for_updates(catalog_hash_resolver(catalog)) == []
