from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf import CSRFProtect
from functools import lru_cache

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()

@lru_cache(maxsize=4)
def get_chat_model(model_name, api_key, temperature=0.7):
    from langchain_google_genai import ChatGoogleGenerativeAI
    return ChatGoogleGenerativeAI(model=model_name, google_api_key=api_key, temperature=temperature)
