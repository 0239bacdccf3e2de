"""
Word supplier for drawing rounds
"""
import random
from typing import Optional, Sequence

WORDS = (
    "Chat", "Chien", "Maison", "Arbre", "Voiture", "Soleil", "Lune", "Étoile",
    "Montagne", "Rivière", "Plage", "Cerf-volant", "Bateau", "Train", "Avion",
    "Ballon", "Livre", "Ordinateur", "Téléphone", "Caméra", "Montre", "Tasse",
    "Fleurs", "Gâteau", "Chocolat", "Pizza", "Hamburger", "Glace", "Fromage",
    "Salade", "Paysage", "Musique", "Danse", "Peinture", "Film", "Jeu", "Robot",
    "Monstre", "Super-héros", "Pirate", "Sirène", "Fée", "Château", "Dragon",
    "Safari", "École", "Sport", "Voyage", "Vacances", "Amis",
)


class WordSupplier:
    """Pick a word uniformly at random from a fixed vocabulary.

    The same word may come up twice in a row.
    """

    def __init__(self, words: Sequence[str] = WORDS, rng: Optional[random.Random] = None):
        words = tuple(w for w in words if w)
        if not words:
            raise ValueError("vocabulary must contain at least one non-empty word")
        self.words = words
        self._rng = rng or random.Random()

    def next(self) -> str:
        return self._rng.choice(self.words)
