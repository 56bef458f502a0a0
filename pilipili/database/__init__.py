"""SQLite settings, value conversion, adapters, migrations, transactions, query helpers and a generic repository."""