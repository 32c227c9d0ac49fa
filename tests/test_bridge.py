"""Tests for bridge file generation."""

import pytest
import yaml

from dotai.assistants import get_registry
from dotai.bridge import (
    ASSISTANT_TO_BRIDGE,
    available_bridge_types,
    bridge_family,
    build_core_instructions,
    build_directory_section,
    existing_dirs,
    generate_bridge_files,
    write_bridge_files,
)


@pytest.fixture
def registry(env):
    return get_registry(env)


def assistants(registry, *ids):
    return [registry.require(i) for i in ids]


class TestContent:
    """Tests for bridge file content."""

    def test_existing_dirs_in_fixed_order(self, project):
        """Existing canonical directories are listed in bridge order."""
        for name in ('prompts', 'skills', 'context', 'rules'):
            (project / '.ai' / name).mkdir(parents=True)
        (project / '.ai' / 'unrelated').mkdir()
        assert existing_dirs(project) == ['skills', 'rules', 'prompts', 'context']

    def test_existing_dirs_none(self, project):
        """No .ai directory means nothing exists."""
        assert existing_dirs(project) == []

    def test_directory_section(self):
        """List each directory with its description."""
        section = build_directory_section(['skills', 'rules'])
        assert section.startswith('\n## AI Configuration\n')
        assert '- `.ai/skills/` - ' in section
        assert '- `.ai/rules/` - ' in section

    def test_directory_section_empty(self):
        """No directories produce no section."""
        assert build_directory_section([]) == ''

    def test_core_instructions(self):
        """Instructions mention each directory that exists."""
        text = build_core_instructions(['rules', 'skills', 'context', 'commands'])
        assert 'These are hard constraints. Never violate them.' in text
        assert '`.ai/skills/`' in text
        assert '`.ai/context/`' in text
        assert '`.ai/commands/`' in text

    def test_core_instructions_skip_prompts(self):
        """Prompts and agents have no instruction paragraph."""
        assert build_core_instructions(['prompts', 'agents']) == ''


class TestGenerate:
    """Tests for generate_bridge_files()"""

    def test_always_includes_agents_md(self, registry, project):
        """AGENTS.md is generated even with no assistants."""
        files = generate_bridge_files([], project)
        assert [f.file_path for f in files] == ['AGENTS.md']

    def test_one_file_per_family(self, registry, project):
        """Assistants sharing a family share a file."""
        files = generate_bridge_files(
            assistants(registry, 'gemini', 'claude', 'antigravity', 'codex', 'cline'),
            project,
        )
        assert [f.file_path for f in files] == ['GEMINI.md', 'CLAUDE.md', 'AGENTS.md']

    def test_all_families(self, registry, project):
        """Every family maps to its own file."""
        files = generate_bridge_files(
            assistants(registry, 'claude', 'cursor', 'copilot', 'gemini', 'windsurf'),
            project,
        )
        assert {f.editor_id: f.file_path for f in files} == {
            'claude': 'CLAUDE.md',
            'cursor': '.cursor/rules/ai-config.mdc',
            'copilot': '.github/copilot-instructions.md',
            'gemini': 'GEMINI.md',
            'windsurf': '.windsurfrules',
            'universal': 'AGENTS.md',
        }

    def test_default_dirs_when_empty(self, registry, project):
        """With an empty .ai/ the bridge lists skills and rules."""
        claude = generate_bridge_files(assistants(registry, 'claude'), project)[0]
        assert claude.content.startswith('# CLAUDE.md\n')
        assert '`.ai/skills/`' in claude.content
        assert '`.ai/rules/`' in claude.content
        assert '`.ai/prompts/`' not in claude.content

    def test_reflects_existing_dirs(self, registry, project):
        """Bridge content follows what is installed."""
        (project / '.ai' / 'prompts').mkdir(parents=True)
        files = generate_bridge_files([], project)
        assert '`.ai/prompts/`' in files[0].content
        assert '`.ai/skills/`' not in files[0].content

    def test_defaults_to_environment_cwd(self, env, project):
        """Without a project root, the environment's cwd is inspected."""
        (project / '.ai' / 'prompts').mkdir(parents=True)
        files = generate_bridge_files([], env=env)
        assert '`.ai/prompts/`' in files[0].content

    def test_cursor_frontmatter(self, registry, project):
        """The Cursor rule carries YAML frontmatter that applies always."""
        cursor = generate_bridge_files(assistants(registry, 'cursor'), project)[0]
        _, block, body = cursor.content.split('---\n', 2)
        meta = yaml.safe_load(block)
        assert meta['alwaysApply'] is True
        assert meta['globs'] is None
        assert '.ai/' in meta['description']
        assert '## AI Configuration' in body

    def test_every_assistant_has_a_family(self, registry):
        """Each registered assistant maps to a bridge family."""
        for assistant in registry:
            assert bridge_family(assistant.id) in available_bridge_types()
        assert set(ASSISTANT_TO_BRIDGE) == set(registry.ids())

    def test_unknown_assistant_family(self):
        """Unknown ids have no family."""
        assert bridge_family('notepad') is None


class TestWrite:
    """Tests for write_bridge_files()"""

    def test_write_creates_parents(self, registry, project):
        """Files are written with their parent directories."""
        files = generate_bridge_files(assistants(registry, 'cursor', 'copilot'), project)
        result = write_bridge_files(files, project)

        assert result.written == [
            '.cursor/rules/ai-config.mdc',
            '.github/copilot-instructions.md',
            'AGENTS.md',
        ]
        assert result.skipped == []
        assert (project / '.github' / 'copilot-instructions.md').read_text().startswith(
            '# Copilot Instructions'
        )

    def test_existing_files_kept(self, registry, project):
        """Existing files are skipped unless overwrite is set."""
        (project / 'CLAUDE.md').write_text('my notes\n')
        files = generate_bridge_files(assistants(registry, 'claude'), project)

        result = write_bridge_files(files, project)
        assert result.skipped == ['CLAUDE.md']
        assert result.written == ['AGENTS.md']
        assert (project / 'CLAUDE.md').read_text() == 'my notes\n'

    def test_overwrite(self, registry, project):
        """overwrite replaces existing files."""
        (project / 'CLAUDE.md').write_text('my notes\n')
        files = generate_bridge_files(assistants(registry, 'claude'), project)

        result = write_bridge_files(files, project, overwrite=True)
        assert result.written == ['CLAUDE.md', 'AGENTS.md']
        assert (project / 'CLAUDE.md').read_text().startswith('# CLAUDE.md')

    def test_write_defaults_to_environment_cwd(self, env, project):
        """Without a project root, files are written to the environment's cwd."""
        result = write_bridge_files(generate_bridge_files([], env=env), env=env)
        assert result.written == ['AGENTS.md']
        assert (project / 'AGENTS.md').exists()

    def test_generation_is_idempotent(self, registry, project):
        """Generating twice for the same tree yields the same content."""
        chosen = assistants(registry, 'claude', 'windsurf')
        first = [f.content for f in generate_bridge_files(chosen, project)]
        second = [f.content for f in generate_bridge_files(chosen, project)]
        assert first == second
