"""Stand-alone two-gender annealing experiment with a fixed layout."""