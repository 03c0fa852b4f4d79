"""REST front end for iExpense."""
