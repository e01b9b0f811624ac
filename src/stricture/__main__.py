from stricture.cli import app

app(prog_name="stricture")
