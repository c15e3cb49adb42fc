from checksums.cli import app

app()
