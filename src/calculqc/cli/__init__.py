"""Interface en ligne de commande `ccalc`."""
