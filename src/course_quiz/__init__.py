"""Assessment engine for quiz elements embedded in course content."""
