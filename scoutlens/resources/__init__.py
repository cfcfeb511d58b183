"""Static lexicons and tables bundled with ScoutLens."""
