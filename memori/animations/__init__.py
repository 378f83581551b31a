"""Terminal animations shown while a scan is running: a progress bar and the game of life."""