import tempfile
import unittest
from pathlib import Path

from omoconf.skills import SkillParseError, default_skill_dirs, discover_skills, parse_frontmatter


def _write_skill(root: Path, name: str, content: str) -> None:
    d = root / name
    d.mkdir(parents=True)
    (d / "SKILL.md").write_text(content, encoding="utf-8")


class TestSkills(unittest.TestCase):
    def test_parse_frontmatter(self) -> None:
        fm, body = parse_frontmatter("---\nname: git-master\ndescription: Git workflows\n---\n# Body\n")
        self.assertEqual(fm, {"name": "git-master", "description": "Git workflows"})
        self.assertEqual(body, "# Body")
        self.assertEqual(parse_frontmatter("# no frontmatter"), ({}, "# no frontmatter"))
        with self.assertRaises(SkillParseError):
            parse_frontmatter("---\nname: [unclosed\n---\n")

    def test_discovers_global_and_project_skills(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            base = Path(td)
            config_dir = base / "config"
            cwd = base / "project"
            _write_skill(config_dir / "skills", "zeta", "---\nname: zeta\ndescription: Last one\n---\n")
            _write_skill(config_dir / "skills", "broken", "---\nname: [oops\n---\n")
            _write_skill(cwd / ".opencode" / "skills", "alpha-dir", "no frontmatter here\n")
            (config_dir / "skills" / "empty-dir").mkdir()

            skills = discover_skills(default_skill_dirs(config_dir, cwd))
            self.assertEqual([(s.name, s.description, s.source) for s in skills], [
                ("alpha-dir", "", "project"),
                ("zeta", "Last one", "global"),
            ])

    def test_missing_dirs(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            self.assertEqual(discover_skills(default_skill_dirs(Path(td) / "a", Path(td) / "b")), [])


if __name__ == "__main__":
    unittest.main()
