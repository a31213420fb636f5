from openai import AsyncAzureOpenAI, AsyncOpenAI


def create_openai_client(config):
    """Build the async model client shared by one pipeline run.

    Uses an Azure deployment when ``OPENAI_ENDPOINT`` is configured, the
    public API otherwise. The caller owns the client and must ``close()`` it.
    """
    if config.get('OPENAI_ENDPOINT'):
        return AsyncAzureOpenAI(
            api_key=config.get('OPENAI_API_KEY'),
            azure_endpoint=config['OPENAI_ENDPOINT'],
            api_version=config.get('OPENAI_API_VERSION'),
        )
    return AsyncOpenAI(api_key=config.get('OPENAI_API_KEY'))
