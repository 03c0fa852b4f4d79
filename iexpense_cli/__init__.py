"""Command-line front end for iExpense."""
