from sqlalchemy import Column, Date, MetaData, Numeric, String, Table, Text

metadata = MetaData()


def books_table(name: str) -> Table:
    """Table definition for a configured books table. One definition per name is kept."""
    existing = metadata.tables.get(name)
    if existing is not None:
        return existing

    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("title", String(200), nullable=False),
        Column("author", String(100), nullable=False),
        Column("isbn", String(17), nullable=False),
        Column("price", Numeric(8, 2, asdecimal=False), nullable=False),
        Column("description", Text, nullable=True),
        Column("published_date", Date, nullable=True),
        Column("created_at", Text, nullable=False),
        Column("updated_at", Text, nullable=False),
    )
