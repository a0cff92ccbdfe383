"""AnkiConnect client, term matching and filtering of terms already in Anki."""