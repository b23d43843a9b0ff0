"""syntax.parserモジュール（文の構文解析）のテスト"""
import pytest

from ddl_normalizer import SQLDialect
from ddl_normalizer.errors import SQLSyntaxError
from ddl_normalizer.syntax import (
    AutoIncrementAttribute, ColumnDefinitionNode, CommentAttribute,
    CommentOnNode, CommentOption, ConstraintNode, CreateTableNode,
    DataTypeNode, ExecuteNode, OtherStatementNode, ProcedureArgument,
    QualifiedName, parse_statement
)



def parse_create(sql: str, dialect: SQLDialect) -> CreateTableNode:
    """CREATE TABLE文を解析し、CreateTableNodeであることを確認する"""
    node = parse_statement(sql, dialect)
    assert isinstance(node, CreateTableNode)
    return node

def columns(node: CreateTableNode) -> list[ColumnDefinitionNode]:
    """カラム定義のみを取得する"""
    return [e for e in node.elements if isinstance(e, ColumnDefinitionNode)]

#
# CREATE TABLE
#

def test_create_table_basic() -> None:
    """基本的なCREATE TABLE文の解析をテストする"""
    node = parse_create("CREATE TABLE users (id INT, name VARCHAR(255));", SQLDialect.MYSQL)
    assert node.table_name == QualifiedName("users")
    assert node.elements == (
        ColumnDefinitionNode("id", DataTypeNode("INT")),
        ColumnDefinitionNode("name", DataTypeNode("VARCHAR(255)")),
    )
    assert node.options == ()

@pytest.mark.parametrize("sql, dialect, expected", [
    ("CREATE TABLE public.mytable (id int)", SQLDialect.POSTGRESQL, "public.mytable"),
    ('CREATE TABLE "ZT_0731"."MYTABLE" (id int)', SQLDialect.ORACLE, '"ZT_0731"."MYTABLE"'),
    ("CREATE TABLE test.dbo.mytable (id int)", SQLDialect.SQLSERVER, "test.dbo.mytable"),
    ("CREATE TABLE [dbo].[my table] (id int)", SQLDialect.SQLSERVER, "[dbo].[my table]"),
    ("CREATE TABLE `default.mytable`(`id` bigint)", SQLDialect.HIVE, "`default.mytable`"),
    ("CREATE TABLE IF NOT EXISTS t (id int)", SQLDialect.SQLITE, "t"),
    ("CREATE GLOBAL TEMPORARY TABLE t (id int)", SQLDialect.ORACLE, "t"),
    ("CREATE UNLOGGED TABLE t (id int)", SQLDialect.POSTGRESQL, "t"),
    ("CREATE EXTERNAL TABLE t (id int)", SQLDialect.HIVE, "t"),
    ("create table t (id int)", SQLDialect.MYSQL, "t"),
])
def test_create_table_name(sql, dialect, expected) -> None:
    """テーブル名（修飾名・引用符・修飾子付き）の解析をテストする"""
    assert parse_create(sql, dialect).table_name == QualifiedName(expected)

def test_create_table_without_name() -> None:
    """テーブル名がない場合にtable_nameがNoneになることをテストする"""
    assert parse_create("CREATE TABLE (id int)", SQLDialect.MYSQL).table_name is None

@pytest.mark.parametrize("column_sql, dialect, expected_type", [
    # 括弧内の空白は詰められる
    ("salary numeric(9, 2) NULL", SQLDialect.POSTGRESQL, DataTypeNode("numeric(9,2)")),
    ('"TS" TIMESTAMP (6)', SQLDialect.ORACLE, DataTypeNode("TIMESTAMP(6)")),
    ('"NAME" VARCHAR2(50 CHAR)', SQLDialect.ORACLE, DataTypeNode("VARCHAR2(50 CHAR)")),
    ("n NUMBER(*,0)", SQLDialect.ORACLE, DataTypeNode("NUMBER(*,0)")),
    # 複数語の型名
    ("x double precision NOT NULL", SQLDialect.POSTGRESQL, DataTypeNode("double precision")),
    ("x character varying(20)", SQLDialect.POSTGRESQL, DataTypeNode("character varying(20)")),
    ("x time without time zone", SQLDialect.POSTGRESQL, DataTypeNode("time without time zone")),
    ("x unsigned big int", SQLDialect.SQLITE, DataTypeNode("unsigned big int")),
    # WITH TIME ZONE は型の一部
    ("x TIMESTAMP(6) WITH LOCAL TIME ZONE", SQLDialect.ORACLE,
     DataTypeNode("TIMESTAMP(6) WITH LOCAL TIME ZONE")),
    # フィールドオプション
    ("c5 bigint unsigned DEFAULT NULL", SQLDialect.MYSQL,
     DataTypeNode("bigint unsigned", "unsigned")),
    ("c1 varchar(10) COLLATE utf8mb4_general_ci NOT NULL", SQLDialect.MYSQL,
     DataTypeNode("varchar(10) COLLATE utf8mb4_general_ci", "COLLATE utf8mb4_general_ci")),
    ("c varchar(10) CHARACTER SET utf8 NOT NULL", SQLDialect.MYSQL,
     DataTypeNode("varchar(10) CHARACTER SET utf8", "CHARACTER SET utf8")),
    ("c int(10) unsigned zerofill", SQLDialect.MYSQL,
     DataTypeNode("int(10) unsigned zerofill", "unsigned zerofill")),
    # 複合型は <...> ごと取り込まれる
    ("tags array<string>", SQLDialect.HIVE, DataTypeNode("array<string>")),
    ("m map<string,int>", SQLDialect.HIVE, DataTypeNode("map<string,int>")),
    # 配列型は [] ごと取り込まれる
    ("tags int[]", SQLDialect.POSTGRESQL, DataTypeNode("int[]")),
    ("m integer[3][3] NOT NULL", SQLDialect.POSTGRESQL, DataTypeNode("integer[3][3]")),
    ("tags text ARRAY", SQLDialect.POSTGRESQL, DataTypeNode("text ARRAY")),
    # 角括弧で囲まれた型名（SSMSの出力）
    ("[id] [int] IDENTITY(1,1) NOT NULL", SQLDialect.SQLSERVER, DataTypeNode("int")),
    ("[name] [nvarchar](50) NULL", SQLDialect.SQLSERVER, DataTypeNode("nvarchar(50)")),
    ("[score] [decimal](18, 2)", SQLDialect.SQLSERVER, DataTypeNode("decimal(18,2)")),
])
def test_column_data_type(column_sql, dialect, expected_type) -> None:
    """カラムのデータ型テキストとフィールドオプションの解析をテストする"""
    node = parse_create(f"CREATE TABLE t ({column_sql})", dialect)
    (column,) = columns(node)
    assert column.data_type == expected_type

def test_column_without_type() -> None:
    """データ型のないカラムのdata_typeがNoneになることをテストする"""
    node = parse_create("CREATE TABLE t (a, b NOT NULL)", SQLDialect.SQLITE)
    assert [c.data_type for c in columns(node)] == [None, None]

@pytest.mark.parametrize("column_sql, dialect, expected", [
    ("id bigint NOT NULL AUTO_INCREMENT COMMENT 'id'", SQLDialect.MYSQL,
     (AutoIncrementAttribute("AUTO_INCREMENT"), CommentAttribute("id"))),
    ("id INTEGER PRIMARY KEY AUTOINCREMENT", SQLDialect.SQLITE,
     (AutoIncrementAttribute("AUTOINCREMENT"),)),
    ("id int IDENTITY(1,1) NOT NULL", SQLDialect.SQLSERVER,
     (AutoIncrementAttribute("IDENTITY"),)),
    ("[id] [int] IDENTITY(1,1) NOT NULL", SQLDialect.SQLSERVER,
     (AutoIncrementAttribute("IDENTITY"),)),
    ("id bigint GENERATED ALWAYS AS IDENTITY", SQLDialect.POSTGRESQL,
     (AutoIncrementAttribute("GENERATED"),)),
    ('"ID" NUMBER GENERATED BY DEFAULT ON NULL AS IDENTITY (START WITH 1)', SQLDialect.ORACLE,
     (AutoIncrementAttribute("GENERATED"),)),
    # 生成列は自動採番ではない
    ("total int GENERATED ALWAYS AS (a + b) STORED", SQLDialect.POSTGRESQL, ()),
    # DEFAULT 内の文字列はコメントではない
    ("c varchar(10) DEFAULT 'COMMENT' COMMENT 'real'", SQLDialect.MYSQL,
     (CommentAttribute("real"),)),
    ("`name` varchar(50) COMMENT 'user''s name'", SQLDialect.HIVE,
     (CommentAttribute("user's name"),)),
])
def test_column_attributes(column_sql, dialect, expected) -> None:
    """コメント・自動採番属性の解析をテストする"""
    (column,) = columns(parse_create(f"CREATE TABLE t ({column_sql})", dialect))
    assert column.attributes == expected

def test_constraints_are_skipped_as_raw_text() -> None:
    """テーブル制約・インデックスがConstraintNodeになることをテストする"""
    sql = """CREATE TABLE t (
        id int,
        CONSTRAINT t_pk PRIMARY KEY (id),
        PRIMARY KEY (id),
        UNIQUE KEY uk (id),
        KEY idx (id),
        INDEX idx2 (id),
        FOREIGN KEY (id) REFERENCES other (id),
        CHECK (id > 0)
    )"""
    node = parse_create(sql, SQLDialect.MYSQL)
    assert len(columns(node)) == 1
    constraints = [e for e in node.elements if isinstance(e, ConstraintNode)]
    assert len(constraints) == 7
    assert constraints[0].text.startswith("CONSTRAINT t_pk PRIMARY KEY")

def test_column_named_period() -> None:
    """PERIOD FOR 以外で始まる要素はカラムとして扱われることをテストする"""
    node = parse_create("CREATE TABLE t (period int, PERIOD FOR SYSTEM_TIME (a, b))",
                        SQLDialect.SQLSERVER)
    assert [c.name for c in columns(node)] == ["period"]

@pytest.mark.parametrize("sql, dialect, expected", [
    ("CREATE TABLE public.settings (key varchar(50) NOT NULL, value text)", SQLDialect.POSTGRESQL,
     ["key", "value"]),
    ("CREATE TABLE t (key TEXT, value TEXT)", SQLDialect.SQLITE, ["key", "value"]),
    ("CREATE TABLE t (KEY VARCHAR2(20), INDEX NUMBER(3))", SQLDialect.ORACLE, ["KEY", "INDEX"]),
    ("CREATE TABLE t (key string, value string)", SQLDialect.HIVE, ["key", "value"]),
    # MySQL専用の FULLTEXT / SPATIAL
    ("CREATE TABLE t (fulltext text, spatial text)", SQLDialect.POSTGRESQL,
     ["fulltext", "spatial"]),
])
def test_columns_named_like_constraint_words(sql, dialect, expected) -> None:
    """制約の形をしていない要素がカラムとして扱われることをテストする"""
    node = parse_create(sql, dialect)
    assert [c.name for c in columns(node)] == expected
    assert all(c.data_type is not None for c in columns(node))
    assert not any(isinstance(e, ConstraintNode) for e in node.elements)

@pytest.mark.parametrize("element, dialect", [
    ("UNIQUE (a)", SQLDialect.SQLITE),
    ("UNIQUE uk (a)", SQLDialect.MYSQL),
    ("CHECK (a > 0)", SQLDialect.ORACLE),
    ('CONSTRAINT "ck" CHECK (a > 0)', SQLDialect.POSTGRESQL),
    ("EXCLUDE USING gist (a WITH =)", SQLDialect.POSTGRESQL),
    ("LIKE other INCLUDING ALL", SQLDialect.POSTGRESQL),
    ("INDEX ix_a NONCLUSTERED (a)", SQLDialect.SQLSERVER),
    ("INDEX ix_a (a)", SQLDialect.SQLSERVER),
    ("FULLTEXT KEY ft (a)", SQLDialect.MYSQL),
    ("KEY idx USING BTREE (a)", SQLDialect.MYSQL),
    ("PRIMARY KEY (a) DISABLE NOVALIDATE", SQLDialect.HIVE),
])
def test_constraint_shapes(element, dialect) -> None:
    """制約・インデックスの形をした要素がConstraintNodeになることをテストする"""
    node = parse_create(f"CREATE TABLE t (a int, {element})", dialect)
    assert [c.name for c in columns(node)] == ["a"]
    assert isinstance(node.elements[1], ConstraintNode)

def test_unclosed_array_bracket() -> None:
    """配列型の [ が閉じていない場合にSQLSyntaxErrorが発生することをテストする"""
    with pytest.raises(SQLSyntaxError):
        parse_statement("CREATE TABLE t (tags int[3)", SQLDialect.POSTGRESQL)

@pytest.mark.parametrize("sql, dialect, expected", [
    ("CREATE TABLE t (id int) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COMMENT 'a1'",
     SQLDialect.MYSQL, (CommentOption("a1"),)),
    ("CREATE TABLE t (id int) COMMENT='users'", SQLDialect.MYSQL, (CommentOption("users"),)),
    ("CREATE TABLE t (id int) COMMENT 'users' PARTITIONED BY (dt string COMMENT 'day') "
     "TBLPROPERTIES ('comment'='x')", SQLDialect.HIVE, (CommentOption("users"),)),
    ("CREATE TABLE t (id int) WITHOUT ROWID", SQLDialect.SQLITE, ()),
])
def test_table_options(sql, dialect, expected) -> None:
    """テーブルオプションのCOMMENTの解析をテストする"""
    assert parse_create(sql, dialect).options == expected

def test_only_first_statement_is_parsed() -> None:
    """最初の文だけが解析されることをテストする"""
    node = parse_create("CREATE TABLE a (x int); CREATE TABLE b (y int);", SQLDialect.SQLITE)
    assert node.table_name == QualifiedName("a")

def test_create_other_object() -> None:
    """CREATE TABLE 以外のCREATE文がOtherStatementNodeになることをテストする"""
    node = parse_statement('CREATE UNIQUE INDEX "MYTABLE_PK" ON "MYTABLE" ("ID")',
                           SQLDialect.ORACLE)
    assert isinstance(node, OtherStatementNode)

@pytest.mark.parametrize("sql", [
    "",
    "  -- only a comment\n",
    ";",
    "CREATE TABLE t",
    "CREATE TABLE t AS SELECT 1",
    "CREATE TABLE t (id int",
    "CREATE TABLE t (id numeric(9, 2)",
    "CREATE TABLE t (id int,, name text)",
    "CREATE TABLE t (id int,)",
    "CREATE TABLE t (id int) STORAGE (INITIAL 1",
])
def test_create_table_syntax_errors(sql) -> None:
    """不正な文でSQLSyntaxErrorが発生することをテストする"""
    with pytest.raises(SQLSyntaxError):
        parse_statement(sql, SQLDialect.POSTGRESQL)

#
# COMMENT ON
#

@pytest.mark.parametrize("sql, expected", [
    ("COMMENT ON TABLE public.mytable IS '娃哈哈'",
     CommentOnNode("TABLE", QualifiedName("public.mytable"), "娃哈哈")),
    ('COMMENT ON COLUMN public.mytable."name" IS \'姓名\'',
     CommentOnNode("COLUMN", QualifiedName('public.mytable."name"'), "姓名")),
    ("comment on column t.c is null",
     CommentOnNode("COLUMN", QualifiedName("t.c"), None)),
    ("COMMENT ON INDEX idx IS 'x'",
     CommentOnNode("INDEX", QualifiedName("idx"), "x")),
    ("COMMENT ON MATERIALIZED VIEW mv IS 'x'",
     CommentOnNode("MATERIALIZED VIEW", QualifiedName("mv"), "x")),
    ("COMMENT ON CONSTRAINT c ON t IS 'x'",
     CommentOnNode("CONSTRAINT", QualifiedName("c"), "x")),
    ("COMMENT ON FUNCTION f(int, text) IS 'x'",
     CommentOnNode("FUNCTION", QualifiedName("f"), "x")),
])
def test_comment_on(sql, expected) -> None:
    """COMMENT ON 文の解析をテストする"""
    assert parse_statement(sql, SQLDialect.POSTGRESQL) == expected

@pytest.mark.parametrize("sql", [
    "COMMENT ON TABLE t",
    "COMMENT ON TABLE t IS",
    "COMMENT ON TABLE t IS 42",
    "COMMENT ON TABLE IS 'x'",
])
def test_comment_on_syntax_errors(sql) -> None:
    """IS <文字列|NULL> のない COMMENT ON 文でSQLSyntaxErrorが発生することをテストする"""
    with pytest.raises(SQLSyntaxError):
        parse_statement(sql, SQLDialect.ORACLE)

#
# EXEC
#

def test_execute_positional_arguments() -> None:
    """位置引数のEXEC文の解析をテストする"""
    sql = ("EXEC test.sys.sp_addextendedproperty 'MS_Description', N'birthday', "
           "'schema', N'dbo', 'table', N'mytable', 'column', N'birthday';")
    node = parse_statement(sql, SQLDialect.SQLSERVER)
    assert isinstance(node, ExecuteNode)
    assert node.procedure == QualifiedName("test.sys.sp_addextendedproperty")
    assert [a.value for a in node.args] == [
        "MS_Description", "birthday", "schema", "dbo", "table", "mytable", "column", "birthday"
    ]
    assert all(a.name is None for a in node.args)

def test_execute_named_arguments() -> None:
    """名前付き引数のEXEC文の解析をテストする"""
    sql = ("EXECUTE sys.sp_addextendedproperty @name=N'MS_Description', @value=N'这里是ID' , "
           "@level0type=N'SCHEMA',@level0name=N'dbo', @level1type=N'TABLE',@level1name=N'Student', "
           "@level2type=N'COLUMN',@level2name=N'id'")
    node = parse_statement(sql, SQLDialect.SQLSERVER)
    assert isinstance(node, ExecuteNode)
    assert node.args[0] == ProcedureArgument("name", "MS_Description")
    assert node.args[1] == ProcedureArgument("value", "这里是ID")
    assert node.args[-1] == ProcedureArgument("level2name", "id")

def test_execute_with_return_status() -> None:
    """戻り値を受け取るEXEC文の解析をテストする"""
    node = parse_statement("EXEC @rc = dbo.proc 1, NULL", SQLDialect.SQLSERVER)
    assert isinstance(node, ExecuteNode)
    assert node.procedure == QualifiedName("dbo.proc")
    assert node.args == (ProcedureArgument(None, "1"), ProcedureArgument(None, "NULL"))

def test_other_statement() -> None:
    """対象外の文がOtherStatementNodeになることをテストする"""
    node = parse_statement("INSERT INTO t VALUES (1)", SQLDialect.MYSQL)
    assert isinstance(node, OtherStatementNode)
