"""Backend de la boutique mono-produit: checkout Stripe, webhook, commandes, emails."""

__version__ = "1.0.0"
