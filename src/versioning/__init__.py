"""Version constraint model, ecosystem grammars, selection and formatting."""
