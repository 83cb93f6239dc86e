from msgharvest.cli import app

app(prog_name="msgharvest")
