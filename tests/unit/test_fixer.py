"""
Unit tests for the auto fixer module.

These tests cover:
- Each fix pass on its own
- The ordered pipeline and its idempotence
- File level fixing, dry run and renaming
"""

import os
import tempfile
from unittest.mock import patch

import pytest

from epicstyle.core.fixer import AutoFixer, Fix, FixResult, FixerError
from epicstyle.core.collector import InputPathError


class TestFixPasses:
    """Test the individual fix passes."""

    def setup_method(self):
        self.fixer = AutoFixer()
        self.fixes = []

    def test_leading_empty_lines(self):
        lines = self.fixer.fix_empty_lines(["", "", "int main() {", "}"], self.fixes)

        assert lines == ["int main() {", "}"]
        assert len(self.fixes) == 2
        assert all(f.rule == 'C-L2' for f in self.fixes)

    def test_consecutive_empty_lines(self):
        lines = self.fixer.fix_empty_lines(["int x;", "", "", "int y;"], self.fixes)

        assert lines == ["int x;", "", "int y;"]
        assert self.fixes == [Fix('C-L2', 'Removed consecutive empty line', 3)]

    def test_trailing_empty_lines(self):
        lines = self.fixer.fix_empty_lines(["int x;", "", "  "], self.fixes)

        assert lines == ["int x;"]
        assert len(self.fixes) == 2

    def test_all_blank_input_becomes_empty(self):
        lines = self.fixer.fix_empty_lines(["", " ", ""], self.fixes)

        assert lines == []

    def test_indentation(self):
        lines = self.fixer.fix_indentation(["        x = 1;", "      y;", "  z;", "\tw;"], self.fixes)

        assert lines == ["\t\tx = 1;", "\t  y;", "  z;", "\tw;"]
        assert [f.description for f in self.fixes] == [
            'Replaced 8 spaces with 2 tabs',
            'Replaced 6 spaces with 1 tabs',
        ]

    def test_declaration_split(self):
        lines = self.fixer.fix_declarations(["int x, y;"], self.fixes)

        assert lines == ["int x;", "int y;"]
        assert self.fixes == [Fix('C-L4', 'Split multiple variable declarations into 2 lines', 1)]

    def test_declaration_split_keeps_indentation_and_trailing_text(self):
        lines = self.fixer.fix_declarations(["\tunsigned a, b , c; /* counters */"], self.fixes)

        assert lines == ["\tunsigned a;", "\tunsigned b;", "\tunsigned c; /* counters */"]

    def test_declaration_split_keeps_carriage_return(self):
        lines = self.fixer.fix_declarations(["int a, b;\r"], self.fixes)

        assert lines == ["int a;\r", "int b;\r"]

    def test_declaration_split_skips_for_loops(self):
        original = ["for (int i = 0, j = 0; i < 3; i++)"]

        assert self.fixer.fix_declarations(original, self.fixes) == original
        assert self.fixes == []

    def test_declaration_split_skips_initializers(self):
        original = ["int a = 1, b = 2;", "char *s, *t;"]

        assert self.fixer.fix_declarations(original, self.fixes) == original

    def test_comment_conversion(self):
        lines = self.fixer.fix_comments(["int x; // Variable"], self.fixes)

        assert lines == ["int x; /* Variable */"]
        assert self.fixes == [Fix('C-C1', 'Converted // comment to /* */', 1)]

    def test_empty_comment_is_removed(self):
        lines = self.fixer.fix_comments(["int x; //"], self.fixes)

        assert lines == ["int x;"]

    def test_bare_comment_line_is_dropped(self):
        lines = self.fixer.fix_comments(["int x;", "\t//", "int y;"], self.fixes)

        assert lines == ["int x;", "int y;"]
        assert len(self.fixes) == 1

    def test_converted_comment_with_slashes_is_left_alone(self):
        lines = self.fixer.fix_comments(["x = 1; // see http://a.b"], self.fixes)
        second_fixes = []
        again = self.fixer.fix_comments(lines, second_fixes)

        assert lines == ["x = 1; /* see http://a.b */"]
        assert again == lines
        assert second_fixes == []

    def test_comment_after_closed_block_comment_is_converted(self):
        lines = self.fixer.fix_comments(["/* a */ // b"], self.fixes)

        assert lines == ["/* a */ /* b */"]
        assert len(self.fixes) == 1

    def test_for_loop_extraction(self):
        lines = self.fixer.fix_for_loops(["for (int i = 0; i < 10; i++)"], self.fixes)

        assert lines == ["int i;", "", "for (i = 0; i < 10; i++)"]
        assert self.fixes == [Fix('C-L5', 'Extracted variable declaration from for loop', 1)]

    def test_for_loop_keeps_indentation(self):
        lines = self.fixer.fix_for_loops(["\tfor (char c = 'a'; c < 'z'; c++) {"], self.fixes)

        assert lines == ["\tchar c;", "", "\tfor (c = 'a'; c < 'z'; c++) {"]

    def test_for_loop_without_type_is_untouched(self):
        original = ["for (i = 0; i < 10; i++)"]

        assert self.fixer.fix_for_loops(original, self.fixes) == original
        assert self.fixes == []


class TestPipeline:
    """Test the ordered pipeline."""

    def setup_method(self):
        self.fixer = AutoFixer()

    def test_fix_lines_order(self):
        lines = [
            "",
            "int main(void)",
            "{",
            "    int a, b; // counters",
            "",
            "",
            "    for (int i = 0; i < 3; i++)",
            "        a++;",
            "}",
            "",
        ]

        fixed, fixes = self.fixer.fix_lines(lines)

        assert fixed == [
            "int main(void)",
            "{",
            "\tint a;",
            "\tint b; /* counters */",
            "",
            "\tint i;",
            "",
            "\tfor (i = 0; i < 3; i++)",
            "\t\ta++;",
            "}",
        ]
        assert [f.rule for f in fixes] == [
            'C-L2', 'C-L2', 'C-L2',
            'C-L3', 'C-L3', 'C-L3',
            'C-L4', 'C-C1', 'C-L5',
        ]

    def test_compaction_reruns_after_dropped_comment(self):
        fixed, _ = self.fixer.fix_lines(["int x;", "", "//", "", "int y;"])

        assert fixed == ["int x;", "", "int y;"]

    def test_second_run_records_no_fix(self):
        lines = ["", "    int a, b; //", "for (int i = 0; i < 2; i++)", "// note", ""]

        once, first_fixes = self.fixer.fix_lines(lines)
        twice, second_fixes = self.fixer.fix_lines(once)

        assert first_fixes
        assert second_fixes == []
        assert twice == once

    def test_fix_text(self):
        text, fixes = self.fixer.fix_text("int x, y;\n")

        assert text == "int x;\nint y;"
        assert [f.rule for f in fixes] == ['C-L2', 'C-L4']

    def test_fix_text_empty(self):
        assert self.fixer.fix_text("") == ("", [])

    def test_fix_text_blank_only(self):
        text, fixes = self.fixer.fix_text("\n\t\n")

        assert text == ""
        assert len(fixes) == 3
        assert self.fixer.fix_text(text) == ("", [])


class TestFilenameFix:
    """Test the filename fix helpers."""

    def setup_method(self):
        self.fixer = AutoFixer()

    def test_should_fix_filename(self):
        assert self.fixer.should_fix_filename("src/MyFile.c")
        assert not self.fixer.should_fix_filename("src/my_file.c")

    def test_fixed_filename(self):
        assert self.fixer.fixed_filename(os.path.join("src", "MyFile.c")) == os.path.join("src", "my_file.c")
        assert self.fixer.fixed_filename("ABCTest.h") == "a_b_c_test.h"

    def test_fixed_filename_replaces_invalid_characters(self):
        assert self.fixer.should_fix_filename("my-file.c")
        assert self.fixer.fixed_filename("my-file.c") == "my_file.c"
        assert self.fixer.fixed_filename("_util.c") == "util.c"

    def test_fixed_filename_without_usable_name(self):
        assert self.fixer.should_fix_filename("__.c")
        assert self.fixer.fixed_filename("__.c") == "__.c"


class TestFixFile:
    """Test file level fixing."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        for root, dirs, files in os.walk(self.temp_dir, topdown=False):
            for name in files:
                os.remove(os.path.join(root, name))
            for name in dirs:
                os.rmdir(os.path.join(root, name))
        os.rmdir(self.temp_dir)

    def write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w', newline='') as f:
            f.write(content)
        return path

    def read(self, path):
        with open(path, newline='') as f:
            return f.read()

    def test_fix_file_writes_changes(self):
        path = self.write("main.c", "int a, b;\n")

        result = AutoFixer().fix_file(path)

        assert self.read(path) == "int a;\nint b;"
        assert result.content_modified
        assert result.filename == "main.c"
        assert result.original_line_count == 2
        assert result.fixed_line_count == 2
        assert result.new_filename == ''

    def test_dry_run_does_not_write(self):
        path = self.write("main.c", "int a, b;\n")

        result = AutoFixer(dry_run=True).fix_file(path)

        assert self.read(path) == "int a, b;\n"
        assert not result.content_modified
        assert len(result.fixes) == 2

    def test_clean_file_is_not_rewritten(self):
        path = self.write("main.c", "int a;")

        with patch.object(AutoFixer, '_write_file') as mock_write:
            result = AutoFixer().fix_file(path)

        mock_write.assert_not_called()
        assert result.fixes == []
        assert not result.content_modified

    def test_crlf_file_keeps_line_endings(self):
        path = self.write("main.c", "int a, b;\r\nint c;")

        AutoFixer().fix_file(path)

        assert self.read(path) == "int a;\r\nint b;\r\nint c;"

    def test_rename_fix_recorded(self):
        path = self.write("MyFile.c", "int a;")

        result = AutoFixer(dry_run=True).fix_file(path)

        assert result.new_filename == os.path.join(self.temp_dir, "my_file.c")
        assert result.fixes == [Fix('C-O1', 'Rename file to my_file.c', 0)]

    def test_empty_file_stays_unchanged(self):
        path = self.write("empty.c", "")
        fixer = AutoFixer()

        first = fixer.fix_file(path)
        second = fixer.fix_file(path)

        assert first.fixes == []
        assert second.fixes == []
        assert not first.content_modified
        assert not second.content_modified
        assert self.read(path) == ""

    def test_blank_file_is_emptied_once(self):
        path = self.write("blank.c", "\n\n")
        fixer = AutoFixer()

        first = fixer.fix_file(path)
        second = fixer.fix_file(path)

        assert first.content_modified
        assert second.fixes == []
        assert not second.content_modified
        assert self.read(path) == ""

    def test_rename_fix_sanitizes_name(self):
        path = self.write("my-file.c", "int a;")

        result = AutoFixer(dry_run=True).fix_file(path)

        assert result.new_filename == os.path.join(self.temp_dir, "my_file.c")
        assert result.fixes == [Fix('C-O1', 'Rename file to my_file.c', 0)]

    def test_unfixable_name_is_logged(self):
        path = self.write("__.c", "int a;")

        with patch('epicstyle.core.fixer.logger') as mock_logger:
            result = AutoFixer(dry_run=True).fix_file(path)

        assert result.fixes == []
        assert result.new_filename == ''
        mock_logger.warning.assert_called_once()

    def test_apply_rename(self):
        path = self.write("MyFile.c", "int a;")
        fixer = AutoFixer()
        result = fixer.fix_file(path)

        new_path = fixer.apply_rename(path, result)

        assert new_path == os.path.join(self.temp_dir, "my_file.c")
        assert os.path.exists(new_path)
        assert not os.path.exists(path)

    def test_apply_rename_dry_run_does_nothing(self):
        path = self.write("MyFile.c", "int a;")
        fixer = AutoFixer(dry_run=True)
        result = fixer.fix_file(path)

        assert fixer.apply_rename(path, result) is None
        assert os.path.exists(path)

    def test_apply_rename_refuses_to_overwrite(self):
        path = self.write("MyFile.c", "int a;")
        self.write("my_file.c", "int b;")
        fixer = AutoFixer()
        result = fixer.fix_file(path)

        with pytest.raises(FixerError):
            fixer.apply_rename(path, result)

        assert os.path.exists(path)

    def test_fix_file_missing_raises(self):
        with pytest.raises(FixerError):
            AutoFixer().fix_file(os.path.join(self.temp_dir, "missing.c"))

    def test_fix_files_continues_after_error(self):
        good = self.write("good.c", "int a, b;")
        missing = os.path.join(self.temp_dir, "missing.c")

        outcomes = AutoFixer().fix_files([missing, good])

        assert outcomes[0].error is not None
        assert outcomes[0].result is None
        assert outcomes[1].error is None
        assert outcomes[1].result.content_modified

    def test_fix_path_directory(self):
        self.write("a.c", "int a, b;")
        self.write("notes.txt", "int a, b;")

        outcomes = AutoFixer(dry_run=True).fix_path(self.temp_dir)

        assert [os.path.basename(o.filepath) for o in outcomes] == ["a.c"]

    def test_fix_path_missing_raises(self):
        with pytest.raises(InputPathError):
            AutoFixer().fix_path(os.path.join(self.temp_dir, "nope"))


class TestFixResult:
    """Test FixResult serialization."""

    def test_to_dict(self):
        result = FixResult("a.c", 3, 4, [Fix('C-L4', 'Split', 1)], True, '')

        assert result.to_dict() == {
            'filename': 'a.c',
            'original_line_count': 3,
            'fixed_line_count': 4,
            'fixes': [{'rule': 'C-L4', 'description': 'Split', 'line': 1}],
            'content_modified': True,
            'new_filename': ''
        }


if __name__ == '__main__':
    pytest.main([__file__])
