"""Weather-analysis collaborators."""

from .adapter import HttpWeatherAnalysisAdapter, WeatherAnalysisAdapter

__all__ = ["HttpWeatherAnalysisAdapter", "WeatherAnalysisAdapter"]
