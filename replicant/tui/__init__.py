"""Models and rendering for the terminal chat interface."""