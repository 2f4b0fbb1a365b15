import threading
import webbrowser

import uvicorn
from dotenv import load_dotenv

if __name__ == "__main__":
    # Provider keys (OPENAI_API_KEY, ANTHROPIC_API_KEY, ...) may live in .env
    load_dotenv()

    from geo_agent.config import settings

    print("Launching GeoGebra Assistant...")

    if settings.server.auto_open_browser:
        # Open the API docs after a short delay
        url = f"http://localhost:{settings.server.port}/docs"
        threading.Timer(1.5, lambda: webbrowser.open(url)).start()

    uvicorn.run("web_app:app", host=settings.server.host, port=settings.server.port, reload=False)
