"""
Built-in dialect table.

Order matters only where patterns overlap: the Derby network client
pattern is a strict subset of the embedded Derby scheme and must be
registered first.
"""

from typing import List

from ..core.descriptor import DialectDescriptor, UrlPattern

DB2_DRIVER = "com.ibm.db2.jcc.DB2Driver"

BUILTIN_DIALECTS: List[DialectDescriptor] = [
    DialectDescriptor(
        "DB2 for z/OS", UrlPattern.scheme("jdbc:db2z:"), DB2_DRIVER, "db2z"
    ),
    DialectDescriptor("DB2/LUW", UrlPattern.scheme("jdbc:db2:"), DB2_DRIVER, "db2"),
    DialectDescriptor(
        "Apache Derby (network client)",
        UrlPattern.regex(r"jdbc:derby://"),
        "org.apache.derby.jdbc.ClientDriver",
        "derby-client",
    ),
    DialectDescriptor(
        "Apache Derby",
        UrlPattern.scheme("jdbc:derby:"),
        "org.apache.derby.jdbc.EmbeddedDriver",
        "derby",
    ),
    DialectDescriptor(
        "Firebird",
        UrlPattern.scheme("jdbc:firebirdsql:"),
        "org.firebirdsql.jdbc.FBDriver",
        "firebird",
    ),
    DialectDescriptor("H2", UrlPattern.scheme("jdbc:h2:"), "org.h2.Driver", "h2"),
    DialectDescriptor(
        "HyperSQL",
        UrlPattern.scheme("jdbc:hsqldb:"),
        "org.hsqldb.jdbc.JDBCDriver",
        "hsqldb",
    ),
    DialectDescriptor(
        "Informix",
        UrlPattern.scheme("jdbc:informix-sqli:"),
        "com.informix.jdbc.IfxDriver",
        "informix",
    ),
    DialectDescriptor(
        "Ingres",
        UrlPattern.scheme("jdbc:ingres:"),
        "com.ingres.jdbc.IngresDriver",
        "ingres",
    ),
    DialectDescriptor(
        "MariaDB",
        UrlPattern.scheme("jdbc:mariadb:"),
        "org.mariadb.jdbc.Driver",
        "mariadb",
    ),
    DialectDescriptor(
        "Microsoft SQL Server",
        UrlPattern.scheme("jdbc:sqlserver:"),
        "com.microsoft.sqlserver.jdbc.SQLServerDriver",
        "mssql",
    ),
    DialectDescriptor(
        "MySQL", UrlPattern.scheme("jdbc:mysql:"), "com.mysql.cj.jdbc.Driver", "mysql"
    ),
    DialectDescriptor(
        "Oracle", UrlPattern.scheme("jdbc:oracle:"), "oracle.jdbc.OracleDriver", "oracle"
    ),
    DialectDescriptor(
        "PostgreSQL",
        UrlPattern.scheme("jdbc:postgresql:"),
        "org.postgresql.Driver",
        "postgresql",
    ),
    DialectDescriptor(
        "Snowflake",
        UrlPattern.scheme("jdbc:snowflake:"),
        "net.snowflake.client.jdbc.SnowflakeDriver",
        "snowflake",
    ),
    DialectDescriptor(
        "SQLite", UrlPattern.scheme("jdbc:sqlite:"), "org.sqlite.JDBC", "sqlite"
    ),
    DialectDescriptor(
        "Sybase ASE",
        UrlPattern.scheme("jdbc:sybase:Tds:"),
        "com.sybase.jdbc4.jdbc.SybDriver",
        "sybase",
    ),
    DialectDescriptor(
        "Sybase ASE (jTDS)",
        UrlPattern.scheme("jdbc:jtds:sybase:"),
        "net.sourceforge.jtds.jdbc.Driver",
        "sybase-jtds",
    ),
]


def builtin_dialects() -> List[DialectDescriptor]:
    """Return a copy of the built-in dialect table in registration order."""
    return list(BUILTIN_DIALECTS)
