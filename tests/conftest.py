import os
import sys
from pathlib import Path

# In-memory database and no real credentials for every test run
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GROQ_API_KEY"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""

sys.path.insert(0, str(Path(__file__).resolve().parent))
