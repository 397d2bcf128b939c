from sqlite_decode.entrypoint import cli

if __name__ == "__main__":
    """
    Provide an entrypoint wrapper around the SQLite Decode module to allow calls in the form of `python main.py ...`
    """
    cli()
