"""Desktop front end for iExpense."""
