from klaw_dbase_sql.cli import run

if __name__ == '__main__':
    run()
