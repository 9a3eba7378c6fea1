"""Quick script to start the Cable Inventory server."""
import os
import sys

# Change to server directory and load .env file
os.chdir(os.path.dirname(os.path.abspath(__file__)))
from dotenv import load_dotenv
load_dotenv()

# Add the server directory to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    import uvicorn
    from cable_inventory.config import get_settings

    settings = get_settings()
    print("\n" + "=" * 60)
    print("Cable Inventory Server Starting...")
    print("=" * 60)
    print(f"\n  API:      http://localhost:{settings.port}/api")
    print(f"  API Docs: http://localhost:{settings.port}/docs")
    print("\n" + "=" * 60 + "\n")

    uvicorn.run(
        "cable_inventory.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
