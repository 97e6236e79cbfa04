__title__ = "httpopts"
__description__ = "Composable request options on top of httpx."
__version__ = "0.1.0"
