import os
import argparse
from optimisation.instance import Instance
from optimisation.parameters import Parameters
from optimisation.placement_model import PlacementModel
from postprocess import result_row, append_to_csv

def solve_case(instance, parameters, results_dir, filename, verbose = 0, log_dir = "", dot = False):
    """
    This solves a particular case for a given instance and set of parameters using branch-and-cut.
    Saves the result as a json.

    Params
    -----------------------------
        instance:           optimisation.instance.Instance
                                instance to solve.
        parameters:         optimisation.parameters.Parameters
                                parameters of the run.
        results_dir:        str
                                string name of directory to save result to.
        filename:           str
                                string filename to save result to.
        verbose:            int
                                verbosity value.
        log_dir:            str
                                string name of directory to save the log to.
        dot:                bool
                                also saves the network with the placement as a DOT file.
    Returns
    -----------------------------
                            optimisation.placement_model.PlacementModel
    """
    model = PlacementModel(instance, parameters, verbose = verbose, log_dir = log_dir, logfile = filename + ".log")
    model.optimise()
    model.parse_solution()
    model.save_as_json(filename = results_dir + filename)
    if dot:
        instance.network.save_as_dot(results_dir + filename, placement = model.placement)
    return model

def main(args = None):
    """
    Solves every instance given on the command line and saves one result json per instance.
    """
    parser = argparse.ArgumentParser(description = "Solves VNF placement instances with branch-and-cut.")
    parser.add_argument("instances", nargs = "+", help = "instance json files")
    parser.add_argument("-p", "--parameters", default = None, help = "parameters json file")
    parser.add_argument("-o", "--output", default = "", help = "directory of the result files")
    parser.add_argument("-c", "--csv", default = None, help = "csv file the results are appended to")
    parser.add_argument("-d", "--dot", action = "store_true", help = "saves the placement of each instance as a DOT file")
    parser.add_argument("-v", "--verbose", type = int, default = 0, choices = [0, 1, 2], help = "verbosity of the log")
    args = parser.parse_args(args)

    parameters = Parameters.load_from_json(args.parameters) if args.parameters is not None else Parameters()
    if args.output and not os.path.exists(args.output):
        os.makedirs(args.output)

    # Loops through each case, loads the instance then solves.
    for case in args.instances:
        instance = Instance()
        instance.load_from_json(case)
        fname = os.path.basename(case).split(".")[0]
        print("solving case {}".format(case))
        solve_case(instance, parameters, os.path.join(args.output, ""), fname, verbose = args.verbose, log_dir = os.path.join(args.output, ""),
                   dot = args.dot)
        if args.csv is not None:
            append_to_csv([result_row(os.path.join(args.output, fname + ".json"))], args.csv)

if __name__ == "__main__":
    main()
