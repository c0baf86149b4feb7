import os

from langchain_openai import ChatOpenAI

from reflect_translate.errors import ConfigurationError
from reflect_translate.utils.config_loader import get_section, load_config

DEFAULT_MODEL_NAME = "gpt-4o"
DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


def get_default_llm(config=None) -> ChatOpenAI:
    """
    Build the chat model used when translate() is called without one.

    Settings come from the `model` section of the config; the API key is read
    from the environment variable it names (OPENAI_API_KEY by default).
    """
    if config is None:
        config = load_config()
    model_config = get_section(config, "model")

    api_key_env = str(model_config.get("api_key_env", DEFAULT_API_KEY_ENV))
    api_key = os.environ.get(api_key_env, "").strip()
    if not api_key:
        raise ConfigurationError(f"Environment variable {api_key_env} is not set; cannot build the default model")

    kwargs = {}
    if model_config.get("api_base"):
        kwargs["base_url"] = str(model_config["api_base"])
    if model_config.get("max_tokens"):
        kwargs["max_tokens"] = int(model_config["max_tokens"])

    return ChatOpenAI(
        model=str(model_config.get("name", DEFAULT_MODEL_NAME)),
        api_key=api_key,
        temperature=float(model_config.get("temperature", 0.3)),
        timeout=float(model_config.get("request_timeout", 180)),
        max_retries=0,
        **kwargs,
    )
