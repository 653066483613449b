from app.teamdocs import create_app

app = create_app()
