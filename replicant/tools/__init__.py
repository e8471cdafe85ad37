"""Tools an agent can call with JSON arguments, and their registry."""