import os
from dotenv import load_dotenv

load_dotenv()

db_backend = os.getenv("DB_BACKEND", "sqlite")
user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")
sqlite_path = os.getenv("SQLITE_PATH")

openai_api_key = os.getenv("OPENAI_API_KEY")
openai_base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
openai_model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
openai_timeout = float(os.getenv("OPENAI_TIMEOUT", "30"))

redis_url = os.getenv("REDIS_URL")
redis_socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))
reconcile_interval_minutes = int(os.getenv("RECONCILE_INTERVAL_MINUTES", "60"))

if __name__ == "__main__":
    print(db_backend, user, host, port, db_name, sqlite_path, openai_base_url, openai_model, redis_url)
