"""HTTP job server that runs the solver on background threads."""