"""
Test for ddl_normalizer.cli.py
"""
import io
import json
import logging
from pathlib import Path

import pytest

from ddl_normalizer import SQLDialect, parse_sql
from ddl_normalizer._logger import PACKAGE_LOGGER, init_logger
from ddl_normalizer.cli import EXIT_OK, EXIT_PARSE_ERROR, EXIT_USAGE_ERROR, main



PG_SQL = """CREATE TABLE public.mytable (
    id int8 NOT NULL,
    "name" varchar(50) NULL,
    CONSTRAINT mytable_pk PRIMARY KEY (id)
);
COMMENT ON COLUMN public.mytable."name" IS '姓名';
COMMENT ON TABLE public.mytable IS '娃哈哈';
"""

@pytest.fixture(autouse=True)
def reset_logger():
    yield
    init_logger(None)
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.NOTSET)

@pytest.fixture
def sql_file(tmp_path: Path) -> Path:
    file = tmp_path / "mytable.sql"
    file.write_text(PG_SQL, encoding="utf-8")
    return file

def write_config(tmp_path: Path, text: str) -> Path:
    file = tmp_path / "config.toml"
    file.write_text(text, encoding="utf-8")
    return file

class TestNormalize:
    def test_file(self, sql_file: Path, capsys):
        assert main([str(sql_file), "-d", "pg"]) == EXIT_OK

        out = capsys.readouterr().out
        assert json.loads(out) == parse_sql(PG_SQL, SQLDialect.POSTGRESQL).asdict()
        # 非ASCII文字はエスケープしない
        assert "娃哈哈" in out

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("CREATE TABLE t (id int COMMENT 'key');"))
        assert main([]) == EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data == {
            "database": "",
            "name": "t",
            "columns": [{"name": "id", "type": "integer", "max_integer": 2147483647,
                         "min_integer": -2147483648, "comment": "key"}]
        }

    def test_stdin_dash(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("CREATE TABLE t (s string)"))
        assert main(["-", "--dialect", "hive"]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["database"] == "default"

    def test_output_file(self, sql_file: Path, tmp_path: Path, capsys):
        output = tmp_path / "out.json"
        assert main([str(sql_file), "-d", "postgres", "-o", str(output)]) == EXIT_OK

        assert capsys.readouterr().out == ""
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["comment"] == "娃哈哈"
        assert data["columns"][1]["comment"] == "姓名"

    def test_indent(self, sql_file: Path, capsys):
        assert main([str(sql_file), "-d", "pg", "--indent", "4"]) == EXIT_OK
        assert capsys.readouterr().out.startswith('{\n    "database": "public"')

    def test_encoding(self, tmp_path: Path, capsys):
        file = tmp_path / "cp932.sql"
        file.write_bytes("CREATE TABLE t (id int COMMENT '番号')".encode("cp932"))
        assert main([str(file), "--encoding", "cp932"]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["columns"][0]["comment"] == "番号"

    def test_config(self, tmp_path: Path, capsys):
        log_path = tmp_path / "logs" / "cli.log"
        config = write_config(tmp_path, f"""
[logging]
path = "{log_path.as_posix()}"

[dialects.hive]
default_namespace = "warehouse"
""")
        file = tmp_path / "t.sql"
        file.write_text("CREATE TABLE t (s string)", encoding="utf-8")

        assert main([str(file), "-d", "hive", "-c", str(config)]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["database"] == "warehouse"
        log = log_path.read_text(encoding="utf-8")
        assert "normalize," in log
        assert "normalized table warehouse.t" in log

class TestErrors:
    def test_parse_error(self, tmp_path: Path, capsys):
        file = tmp_path / "bad.sql"
        file.write_text("CREATE TABLE t (id json)", encoding="utf-8")

        assert main([str(file)]) == EXIT_PARSE_ERROR
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("ddl-normalizer: error: column 'id': ")

    def test_no_create_table(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("COMMENT ON TABLE t IS 'x';"))
        assert main(["-d", "pg"]) == EXIT_PARSE_ERROR
        assert "no CREATE TABLE statement found" in capsys.readouterr().err

    def test_unknown_dialect(self, sql_file: Path, capsys):
        assert main([str(sql_file), "-d", "db2"]) == EXIT_USAGE_ERROR
        assert "Unknown SQL dialect 'db2'" in capsys.readouterr().err

    def test_missing_input(self, tmp_path: Path, capsys):
        assert main([str(tmp_path / "missing.sql")]) == EXIT_USAGE_ERROR
        assert "cannot read" in capsys.readouterr().err

    def test_undecodable_input(self, tmp_path: Path, capsys):
        file = tmp_path / "cp932.sql"
        file.write_bytes("CREATE TABLE t (id int COMMENT '番号')".encode("cp932"))
        assert main([str(file)]) == EXIT_USAGE_ERROR
        assert "cannot read" in capsys.readouterr().err

    @pytest.mark.parametrize("text", [
        '[logging]\nlevel = "TRACE"\n',
        "[dialects.db2]\n",
        "[logging\n",
    ])
    def test_invalid_config(self, sql_file: Path, tmp_path: Path, text, capsys):
        config = write_config(tmp_path, text)
        assert main([str(sql_file), "-c", str(config)]) == EXIT_USAGE_ERROR
        assert "configuration" in capsys.readouterr().err

    def test_missing_config(self, sql_file: Path, tmp_path: Path):
        assert main([str(sql_file), "-c", str(tmp_path / "missing.toml")]) == EXIT_USAGE_ERROR

    def test_unwritable_output(self, sql_file: Path, tmp_path: Path, capsys):
        assert main([str(sql_file), "-d", "pg", "-o", str(tmp_path)]) == EXIT_USAGE_ERROR
        assert "cannot write" in capsys.readouterr().err

    def test_invalid_argument(self):
        with pytest.raises(SystemExit) as e:
            main(["--indent", "four"])
        assert e.value.code == 2
