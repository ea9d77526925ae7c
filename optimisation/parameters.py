import json

APPROXIMATIONS = ["none", "relaxation", "restriction"]

class Parameters(object):
    """
    Class representing the run parameters of the placement solver.
    -------------------
    Params:
        node_cover:                 bool
                                        adds the node cover inequalities to the cut pool.
        chain_cover:                bool
                                        separates chain cover and generalized cover inequalities.
        vnf_lower_bound:            bool
                                        adds the VNF lower bound inequalities to the cut pool.
        section_failure:            bool
                                        adds the section failure inequalities to the cut pool.
        availability_cuts:          bool
                                        separates availability cover inequalities heuristically.
        lazy:                       bool
                                        rejects integer candidates violating an availability requirement.
        heuristic:                  bool
                                        runs the matheuristic on fractional solutions.
        disaggregated_placement:    bool
                                        uses x <= y placement constraints instead of the aggregated big-M form.
        strong_capacity:            bool
                                        adds the strong node capacity constraints.
        approximation:              str
                                        availability formulation, one of "none", "relaxation" or "restriction".
        nb_breakpoints:             int
                                        number of breakpoints of the piecewise linear availability approximations.
        linear_relaxation:          bool
                                        solves the linear relaxation of the base model.
        time_limit:                 float
                                        time limit of the search in seconds.
        threads:                    int
                                        number of threads used by the solver.
        seed:                       int
                                        seed of the random draws of the matheuristic and of the solver.
    """
    def __init__(self, node_cover: bool = True, chain_cover: bool = True, vnf_lower_bound: bool = True, section_failure: bool = True,
                availability_cuts: bool = True, lazy: bool = True, heuristic: bool = True, disaggregated_placement: bool = True,
                strong_capacity: bool = False, approximation: str = "none", nb_breakpoints: int = 10, linear_relaxation: bool = False,
                time_limit: float = 3600, threads: int = 1, seed: int = 20102019):
        if approximation not in APPROXIMATIONS:
            raise ValueError("Invalid approximation type {}. Use one of {}.".format(approximation, APPROXIMATIONS))
        if nb_breakpoints < 2:
            raise ValueError("Number of breakpoints must be at least 2, got {}.".format(nb_breakpoints))
        if threads < 1:
            raise ValueError("Number of threads must be positive, got {}.".format(threads))
        self.node_cover = node_cover
        self.chain_cover = chain_cover
        self.vnf_lower_bound = vnf_lower_bound
        self.section_failure = section_failure
        self.availability_cuts = availability_cuts
        self.lazy = lazy
        self.heuristic = heuristic
        self.disaggregated_placement = disaggregated_placement
        self.strong_capacity = strong_capacity
        self.approximation = approximation
        self.nb_breakpoints = nb_breakpoints
        self.linear_relaxation = linear_relaxation
        self.time_limit = time_limit
        self.threads = threads
        self.seed = seed

    def to_json(self) -> dict:
        """
        Returns a json dictionary of the parameters.
        """
        return dict(self.__dict__)

    def __str__(self):
        return "\n".join("{}: {}".format(key, value) for key, value in self.to_json().items())

    def save_as_json(self, filename: str):
        """
        saves the parameters as a JSON to filename.json
        """
        if filename[-5:] != ".json":
            filename = filename + ".json"
        with open(filename, 'w') as fp:
            json.dump(self.to_json(), fp, indent=4, separators=(", ", ": "))

    @classmethod
    def load_from_dict(cls, data: dict):
        """
        Given a json dictionary, returns the parameters. Missing keys take their default value.
        """
        unknown = [key for key in data.keys() if key not in cls().to_json()]
        if unknown:
            raise ValueError("Unknown parameters {}.".format(unknown))
        return cls(**data)

    @classmethod
    def load_from_json(cls, filename: str):
        """
        Given a json file, returns the parameters it holds.
        """
        if filename[-5:] != ".json":
            filename = filename + ".json"
        with open(filename) as f:
            data = json.load(f)
        return cls.load_from_dict(data)
